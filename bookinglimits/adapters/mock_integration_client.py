"""
Mock marketplace client for running without Integration API credentials.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pendulum

from ..domain.exceptions import MarketplaceAPIError
from ..domain.models import Booking, LimitationConfig, Listing


class MockIntegrationClient:
    """
    Mock client that simulates Integration API responses.

    Listings and bookings are loaded from mock_marketplace_data.json (or a
    given mapping of the same shape) and kept in memory, so limitation
    updates are visible to later queries on the same instance.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None, timezone: str = "UTC"):
        """
        Initialize the mock client.

        Args:
            data: Optional dict with "listings" and "bookings" keys; defaults
                to the bundled JSON file
            timezone: IANA timezone bookings are converted to
        """
        self.timezone = timezone
        if data is None:
            data = self._load_marketplace_data()
        self.listing_records: List[Dict[str, Any]] = copy.deepcopy(list(data.get("listings", [])))
        self.booking_records: Dict[str, List[Dict[str, str]]] = copy.deepcopy(
            dict(data.get("bookings", {}))
        )

    @staticmethod
    def _load_marketplace_data() -> Dict[str, Any]:
        """Load mock marketplace data from JSON file."""
        data_file = Path(__file__).parent / "mock_marketplace_data.json"

        if data_file.exists():
            with open(data_file, "r", encoding="utf-8") as f:
                return json.load(f)

        # Fallback to empty if file doesn't exist
        return {}

    async def query_listings(self, params: Mapping[str, Any]) -> List[Listing]:
        return self.get_listings(params)

    async def fetch_bookings(self, listing: Listing) -> List[Booking]:
        return self.get_bookings(listing.listing_id)

    def get_listings(self, params: Mapping[str, Any]) -> List[Listing]:
        """Return every mock listing; query parameters are ignored."""
        return [Listing.from_api(record) for record in self.listing_records]

    def get_bookings(self, listing_id: str) -> List[Booking]:
        """Return the mock bookings of a listing."""
        bookings: List[Booking] = []

        for item in self.booking_records.get(listing_id, []):
            bookings.append(
                Booking(
                    start=pendulum.parse(item["start"]).in_timezone(self.timezone),
                    end=pendulum.parse(item["end"]).in_timezone(self.timezone),
                )
            )

        return bookings

    def update_listing_limitations(self, listing_id: str, limits: LimitationConfig) -> Listing:
        """Store limitations on the in-memory listing record."""
        for record in self.listing_records:
            if Listing.from_api(record).listing_id == listing_id:
                attributes = record.setdefault("attributes", {})
                public_data = attributes.setdefault("publicData", {})
                public_data["bookingLimitations"] = limits.to_public_data()
                return Listing.from_api(record)

        raise MarketplaceAPIError(f"Listing not found: {listing_id}")

    def test_connection(self) -> Dict[str, Any]:
        """Mock connection test."""
        return {"data": {"type": "marketplace", "attributes": {"name": "Mock marketplace"}}}
