"""
Tests for the per-week limitation evaluator.
"""

import pendulum
import pytest

from bookinglimits.domain.limitation_evaluator import LimitationEvaluator
from bookinglimits.domain.models import Booking, LimitationConfig


def _booking(start: str, end: str) -> Booking:
    return Booking(
        start=pendulum.parse(start, tz="UTC"),
        end=pendulum.parse(end, tz="UTC"),
    )


class TestLimitationEvaluator:
    """Tests for LimitationEvaluator."""

    @pytest.mark.parametrize(
        "limits",
        [
            None,
            LimitationConfig(),
            LimitationConfig(hours_per_day=0, number_per_day=0, number_per_week=0),
        ],
    )
    def test_no_limitation_is_always_valid(self, limits):
        evaluator = LimitationEvaluator()
        bookings = [
            _booking("2024-01-02 08:00", "2024-01-02 20:00"),
            _booking("2024-01-02 20:00", "2024-01-02 23:00"),
        ]

        assert evaluator.is_week_valid(bookings, limits)

    def test_number_per_week_boundary(self):
        """Exactly N bookings is still valid, N + 1 is not."""
        evaluator = LimitationEvaluator()
        limits = LimitationConfig(number_per_week=2)
        bookings = [
            _booking("2024-01-02 10:00", "2024-01-02 11:00"),
            _booking("2024-01-03 10:00", "2024-01-03 11:00"),
        ]

        assert evaluator.is_week_valid(bookings, limits)
        assert not evaluator.is_week_valid(
            bookings + [_booking("2024-01-04 10:00", "2024-01-04 11:00")],
            limits,
        )

    def test_hours_per_day_single_day_over_cap(self):
        """Two bookings totalling 5h on the only booked day exceed a 4h cap."""
        evaluator = LimitationEvaluator()
        bookings = [
            _booking("2024-01-02 08:00", "2024-01-02 11:00"),
            _booking("2024-01-02 13:00", "2024-01-02 15:00"),
        ]

        assert not evaluator.is_week_valid(bookings, LimitationConfig(hours_per_day=4))

    def test_hours_per_day_at_cap_is_valid(self):
        evaluator = LimitationEvaluator()
        bookings = [_booking("2024-01-02 08:00", "2024-01-02 12:00")]

        assert evaluator.is_week_valid(bookings, LimitationConfig(hours_per_day=4))

    def test_hours_per_day_needs_every_day_over_cap(self):
        """One day over the cap does not close the week while another day is under it."""
        evaluator = LimitationEvaluator()
        limits = LimitationConfig(hours_per_day=4)
        monday_over = _booking("2024-01-01 08:00", "2024-01-01 13:00")
        tuesday_under = _booking("2024-01-02 08:00", "2024-01-02 09:00")
        tuesday_over = _booking("2024-01-02 08:00", "2024-01-02 14:00")

        assert evaluator.is_week_valid([monday_over, tuesday_under], limits)
        assert not evaluator.is_week_valid([monday_over, tuesday_over], limits)

    def test_number_per_day_needs_every_day_over_cap(self):
        evaluator = LimitationEvaluator()
        limits = LimitationConfig(number_per_day=1)
        monday = [
            _booking("2024-01-01 08:00", "2024-01-01 09:00"),
            _booking("2024-01-01 10:00", "2024-01-01 11:00"),
        ]

        assert not evaluator.is_week_valid(monday, limits)
        assert evaluator.is_week_valid(
            monday + [_booking("2024-01-03 10:00", "2024-01-03 11:00")],
            limits,
        )

    def test_zero_limit_applies_when_another_limit_is_set(self):
        evaluator = LimitationEvaluator()
        limits = LimitationConfig(hours_per_day=0, number_per_week=5)
        bookings = [_booking("2024-01-02 10:00", "2024-01-02 10:30")]

        assert not evaluator.is_week_valid(bookings, limits)

    def test_all_axes_must_pass(self):
        evaluator = LimitationEvaluator()
        limits = LimitationConfig(hours_per_day=8, number_per_day=3, number_per_week=1)
        bookings = [
            _booking("2024-01-01 10:00", "2024-01-01 11:00"),
            _booking("2024-01-02 10:00", "2024-01-02 11:00"),
        ]

        assert not evaluator.is_week_valid(bookings, limits)

    def test_build_day_aggregates(self):
        bookings = [
            _booking("2024-01-01 10:00", "2024-01-01 12:00"),  # Monday
            _booking("2024-01-01 14:00", "2024-01-01 15:00"),  # Monday
            _booking("2024-01-03 09:00", "2024-01-03 10:00"),  # Wednesday
        ]

        aggregates = LimitationEvaluator.build_day_aggregates(bookings)

        assert set(aggregates) == {1, 3}
        assert aggregates[1].hours_total == 3.0
        assert aggregates[1].number_total == 2
        assert aggregates[3].number_total == 1


def test_text_zero_hours_cap_closes_booked_week():
    limits = LimitationConfig.from_public_data(
        {"hoursPerDay": "0", "numberPerDay": None, "numberPerWeek": None}
    )
    bookings = [_booking("2024-01-02 10:00", "2024-01-02 10:30")]

    assert not LimitationEvaluator().is_week_valid(bookings, limits)
