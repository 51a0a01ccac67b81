"""
Decides whether one week of bookings still has capacity under a listing's limits.
"""

from typing import Dict, Optional, Sequence

from .models import Booking, DayAggregate, LimitationConfig


class LimitationEvaluator:
    """
    Judges a single week against a LimitationConfig.

    A week is invalid when its bookings already exhaust the configured caps.
    """

    def is_week_valid(
        self,
        bookings: Sequence[Booking],
        limits: Optional[LimitationConfig],
    ) -> bool:
        """
        Check whether the week described by ``bookings`` can take more bookings.

        Args:
            bookings: Bookings fully contained in one week window
            limits: The listing's limitation config, or None

        Returns:
            True if the week is still open
        """
        if limits is None or limits.is_unlimited():
            return True

        day_aggregates = self.build_day_aggregates(bookings)

        # NOTE: the per-day axes only fail the week when *every* booked day is
        # over the cap, not when any day is. Kept as observed in production
        # pending confirmation from the listing owners.
        violates_hours_per_day = limits.hours_per_day is not None and all(
            aggregate.hours_total > limits.hours_per_day
            for aggregate in day_aggregates.values()
        )

        violates_number_per_day = limits.number_per_day is not None and all(
            aggregate.number_total > limits.number_per_day
            for aggregate in day_aggregates.values()
        )

        satisfies_number_per_week = (
            limits.number_per_week is None
            or len(bookings) <= limits.number_per_week
        )

        return (
            not violates_hours_per_day
            and not violates_number_per_day
            and satisfies_number_per_week
        )

    @staticmethod
    def build_day_aggregates(bookings: Sequence[Booking]) -> Dict[int, DayAggregate]:
        """
        Group bookings by weekday of their start (0=Sunday .. 6=Saturday).

        Example:
        Mon 10:00-12:00, Mon 14:00-15:00, Wed 09:00-10:00
        Result: {1: (3.0 h, 2), 3: (1.0 h, 1)}
        """
        aggregates: Dict[int, DayAggregate] = {}

        for booking in bookings:
            day = booking.weekday_index()
            aggregates.setdefault(day, DayAggregate()).add(booking)

        return aggregates
