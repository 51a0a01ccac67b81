"""
Domain layer - Pure business logic without external dependencies.
"""

from .exceptions import (
    AuthenticationError,
    BookingFetchError,
    BookingLimitsError,
    InvalidRangeError,
    MarketplaceAPIError,
)
from .limitation_evaluator import LimitationEvaluator
from .models import (
    Booking,
    DayAggregate,
    LimitationConfig,
    Listing,
    TimeRange,
    WeekBounds,
    WeekWindow,
)
from .visibility import VisibilityDecider
from .week_partitioner import WeekPartitioner, in_range

__all__ = [
    "AuthenticationError",
    "Booking",
    "BookingFetchError",
    "BookingLimitsError",
    "DayAggregate",
    "InvalidRangeError",
    "LimitationConfig",
    "LimitationEvaluator",
    "Listing",
    "MarketplaceAPIError",
    "TimeRange",
    "VisibilityDecider",
    "WeekBounds",
    "WeekPartitioner",
    "WeekWindow",
    "in_range",
]
