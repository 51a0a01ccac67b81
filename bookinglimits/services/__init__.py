"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .listing_filter import (
    FilterOutcome,
    ListingFilterService,
    MarketplaceClientProtocol,
    transform_bounds,
)

__all__ = [
    "FilterOutcome",
    "ListingFilterService",
    "MarketplaceClientProtocol",
    "transform_bounds",
]
