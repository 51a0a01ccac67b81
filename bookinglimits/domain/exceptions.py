"""
Domain-specific exception hierarchy for the booking limits filter.
"""

from __future__ import annotations


class BookingLimitsError(Exception):
    """Base class for all application-level errors."""


class MarketplaceAPIError(BookingLimitsError):
    """Raised when marketplace data cannot be fetched or parsed."""


class AuthenticationError(BookingLimitsError):
    """Raised when authentication or token handling fails."""


class InvalidRangeError(BookingLimitsError):
    """Raised when a query start or end date cannot be parsed."""


class BookingFetchError(BookingLimitsError):
    """Raised when the bookings of a single listing could not be fetched."""

    def __init__(self, listing_id: str, cause: BaseException | None = None):
        self.listing_id = listing_id
        self.cause = cause
        reason = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to fetch bookings for listing {listing_id}{reason}")
