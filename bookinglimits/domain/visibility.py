"""
Aggregates per-week limitation checks into one visibility decision per listing.
"""

from typing import List, Sequence

from .limitation_evaluator import LimitationEvaluator
from .models import Booking, Listing, WeekBounds, WeekWindow
from .week_partitioner import in_range


class VisibilityDecider:
    """
    A listing stays visible while at least one week in the query range is open.
    """

    def __init__(self, evaluator: LimitationEvaluator | None = None):
        self.evaluator = evaluator or LimitationEvaluator()

    def is_visible(
        self,
        listing: Listing,
        bookings: Sequence[Booking],
        bounds: WeekBounds,
    ) -> bool:
        """
        Decide whether the listing should be shown for the partitioned range.

        Args:
            listing: The listing whose limitations apply
            bookings: The listing's bookings inside the query range
            bounds: Week partition of the query range

        Returns:
            True if any week still has capacity
        """
        limits = listing.limitations

        if limits is None or limits.is_unlimited():
            return True

        # No weeks means no booking can fall in range
        if not bounds.weeks:
            return True

        return any(
            self._is_week_open(week, bookings, listing)
            for week in bounds.weeks
        )

    def _is_week_open(
        self,
        week: WeekWindow,
        bookings: Sequence[Booking],
        listing: Listing,
    ) -> bool:
        week_bookings = self.bookings_in_week(week, bookings)

        if not week_bookings:
            return True

        return self.evaluator.is_week_valid(week_bookings, listing.limitations)

    @staticmethod
    def bookings_in_week(week: WeekWindow, bookings: Sequence[Booking]) -> List[Booking]:
        """Select the bookings fully contained in the week window."""
        return [
            booking for booking in bookings
            if in_range(booking.start, booking.end, week.start, week.end)
        ]
