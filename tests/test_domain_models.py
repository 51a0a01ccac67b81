"""
Tests for domain models.
"""

import pendulum
import pytest

from bookinglimits.domain.models import Booking, LimitationConfig, Listing, TimeRange


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = pendulum.parse("2024-01-01 09:00", tz="UTC")
        end = pendulum.parse("2024-01-01 17:00", tz="UTC")

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end

    def test_single_instant_range_is_allowed(self):
        """A range may start and end at the same instant."""
        instant = pendulum.parse("2024-01-01 09:00", tz="UTC")

        tr = TimeRange(start=instant, end=instant)

        assert tr.start == tr.end

    def test_invalid_time_range_raises_error(self):
        """Test that creating an inverted time range raises ValueError."""
        start = pendulum.parse("2024-01-01 17:00", tz="UTC")
        end = pendulum.parse("2024-01-01 09:00", tz="UTC")

        with pytest.raises(ValueError, match="Start time .* must not be after end time"):
            TimeRange(start=start, end=end)

    def test_contains_requires_full_containment(self):
        """Partial overlap is not containment."""
        tr = TimeRange(
            start=pendulum.parse("2024-01-01 09:00", tz="UTC"),
            end=pendulum.parse("2024-01-01 17:00", tz="UTC")
        )

        assert tr.contains(
            pendulum.parse("2024-01-01 09:00", tz="UTC"),
            pendulum.parse("2024-01-01 17:00", tz="UTC"),
        )
        assert not tr.contains(
            pendulum.parse("2024-01-01 16:00", tz="UTC"),
            pendulum.parse("2024-01-01 18:00", tz="UTC"),
        )

    def test_overlaps(self):
        """Test overlap detection."""
        tr1 = TimeRange(
            start=pendulum.parse("2024-01-01 09:00", tz="UTC"),
            end=pendulum.parse("2024-01-01 12:00", tz="UTC")
        )
        tr2 = TimeRange(
            start=pendulum.parse("2024-01-01 11:00", tz="UTC"),
            end=pendulum.parse("2024-01-01 14:00", tz="UTC")
        )
        tr3 = TimeRange(
            start=pendulum.parse("2024-01-01 12:00", tz="UTC"),
            end=pendulum.parse("2024-01-01 17:00", tz="UTC")
        )

        assert tr1.overlaps(tr2)
        assert not tr1.overlaps(tr3)


class TestBooking:
    """Tests for Booking model."""

    def test_duration_hours(self):
        booking = Booking(
            start=pendulum.parse("2024-01-02 10:00", tz="UTC"),
            end=pendulum.parse("2024-01-02 12:30", tz="UTC"),
        )

        assert booking.duration_hours() == 2.5

    def test_duration_is_absolute(self):
        """Inverted bookings still count their length."""
        booking = Booking(
            start=pendulum.parse("2024-01-02 12:00", tz="UTC"),
            end=pendulum.parse("2024-01-02 10:00", tz="UTC"),
        )

        assert booking.duration_hours() == 2.0

    def test_weekday_index_starts_on_sunday(self):
        sunday = Booking(
            start=pendulum.parse("2024-01-07 10:00", tz="UTC"),
            end=pendulum.parse("2024-01-07 11:00", tz="UTC"),
        )
        saturday = Booking(
            start=pendulum.parse("2024-01-06 10:00", tz="UTC"),
            end=pendulum.parse("2024-01-06 11:00", tz="UTC"),
        )

        assert sunday.weekday_index() == 0
        assert saturday.weekday_index() == 6


class TestLimitationConfig:
    """Tests for LimitationConfig parsing and serialization."""

    def test_absent_limitations(self):
        assert LimitationConfig.from_public_data(None) is None
        assert LimitationConfig.from_public_data("limited") is None

    def test_numeric_strings_are_coerced(self):
        limits = LimitationConfig.from_public_data(
            {"hoursPerDay": "4", "numberPerDay": None, "numberPerWeek": 3}
        )

        assert limits == LimitationConfig(hours_per_day=4.0, number_per_week=3.0)

    def test_malformed_values_mean_no_limit(self):
        limits = LimitationConfig.from_public_data(
            {"hoursPerDay": "lots", "numberPerDay": [2], "numberPerWeek": True}
        )

        assert limits == LimitationConfig()
        assert limits.hours_per_day is None
        assert limits.number_per_week is None

    def test_missing_keys_mean_no_limit(self):
        limits = LimitationConfig.from_public_data({"numberPerDay": 2})

        assert limits.number_per_day == 2.0
        assert limits.number_per_week is None
        assert not limits.is_unlimited()

    def test_zero_limits_are_unlimited(self):
        limits = LimitationConfig(hours_per_day=0, number_per_day=0, number_per_week=0)

        assert limits.is_unlimited()

    def test_stored_numeric_zeros_are_unlimited(self):
        limits = LimitationConfig.from_public_data(
            {"hoursPerDay": 0, "numberPerDay": None, "numberPerWeek": ""}
        )

        assert limits.is_unlimited()

    def test_text_zero_is_a_real_cap(self):
        """A "0" typed into the settings form is stored as text and still limits."""
        limits = LimitationConfig.from_public_data(
            {"hoursPerDay": "0", "numberPerDay": None, "numberPerWeek": None}
        )

        assert limits.hours_per_day == 0.0
        assert not limits.is_unlimited()

    def test_text_zero_from_form_is_a_real_cap(self):
        limits = LimitationConfig.from_form(False, {"numberPerWeek": "0"})

        assert limits.number_per_week == 0.0
        assert not limits.is_unlimited()

    def test_from_form_unlimited_resets_every_axis(self):
        limits = LimitationConfig.from_form(True, {"hoursPerDay": 4})

        assert limits == LimitationConfig()

    def test_from_form_merges_over_defaults(self):
        limits = LimitationConfig.from_form(False, {"number_per_week": 5, "hoursPerDay": "2.5"})

        assert limits == LimitationConfig(hours_per_day=2.5, number_per_week=5.0)

    def test_to_public_data(self):
        limits = LimitationConfig(hours_per_day=2.5, number_per_week=5.0)

        assert limits.to_public_data() == {
            "hoursPerDay": 2.5,
            "numberPerDay": None,
            "numberPerWeek": 5,
        }


class TestListing:
    """Tests for Listing parsing."""

    def test_from_api(self):
        record = {
            "id": {"uuid": "abc"},
            "type": "listing",
            "attributes": {
                "title": "Studio",
                "publicData": {"bookingLimitations": {"numberPerWeek": 2}},
            },
        }

        listing = Listing.from_api(record)

        assert listing.listing_id == "abc"
        assert listing.title == "Studio"
        assert listing.limitations.number_per_week == 2.0
        assert listing.raw == record

    def test_from_api_without_public_data(self):
        listing = Listing.from_api({"id": "plain-id", "attributes": {}})

        assert listing.listing_id == "plain-id"
        assert listing.limitations is None
