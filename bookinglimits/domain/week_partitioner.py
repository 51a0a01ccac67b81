"""
Splits a query date range into calendar-week windows.

Weeks end on Sunday at the last instant of the day in the configured
timezone. The computation depends only on its inputs, never on the
current wall-clock date.
"""

from typing import List

import pendulum
from pendulum import DateTime

from .models import WeekBounds, WeekWindow


def in_range(
    range_start: DateTime,
    range_end: DateTime,
    window_start: DateTime,
    window_end: DateTime,
) -> bool:
    """
    Check whether [range_start, range_end] is fully contained in the window.

    Overlap is not enough: a booking straddling a week boundary belongs to
    neither of the two weeks.
    """
    return range_start >= window_start and range_end <= window_end


class WeekPartitioner:
    """
    Partitions a date range into week windows.

    Algorithm:
    1. Normalize start to midnight and end to the end of its day
    2. Take the Sunday closing the week that contains start
    3. Step forward seven days at a time while still before end
    4. Close the list with end and pair up consecutive breakpoints
    """

    def __init__(self, timezone: str = "UTC"):
        self.timezone = timezone

    def partition(
        self,
        start_date: DateTime,
        end_date: DateTime,
        exclude_end: bool = False,
    ) -> WeekBounds:
        """
        Partition the range into week windows.

        Args:
            start_date: First day of the query range
            end_date: Last day of the query range
            exclude_end: Treat end_date as exclusive by stepping back one day
                before normalizing

        Returns:
            WeekBounds with the normalized start/end and the week windows
        """
        start = self._localize(start_date).start_of("day")
        end = self._localize(end_date)

        # Date filters send the day after the last requested night
        if exclude_end:
            end = end.subtract(days=1)
        end = end.end_of("day")

        breakpoints = self._get_breakpoints(start, end)

        weeks = [
            WeekWindow(start=window_start, end=window_end)
            for window_start, window_end in zip(breakpoints, breakpoints[1:])
        ]

        return WeekBounds(start=start, end=end, weeks=weeks)

    def _localize(self, value: DateTime) -> DateTime:
        if isinstance(value, DateTime):
            return value.in_timezone(self.timezone)
        return pendulum.instance(value, tz=self.timezone)

    def _get_breakpoints(self, start: DateTime, end: DateTime) -> List[DateTime]:
        """
        Build the ordered list of week boundaries, starting with start.

        A single-day range ending before it starts yields only [start],
        i.e. no windows at all.
        """
        breakpoints: List[DateTime] = [start]

        # end_of("week") is the same day when start is already a Sunday
        boundary = start.end_of("week")

        while boundary < end:
            breakpoints.append(boundary)
            boundary = boundary.add(days=7)

        if breakpoints[-1] < end:
            breakpoints.append(end)

        return breakpoints
