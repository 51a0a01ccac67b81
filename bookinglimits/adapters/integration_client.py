"""
Marketplace Integration API client for fetching listings and bookings.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import MarketplaceAPIError
from ..domain.models import Booking, LimitationConfig, Listing
from .integration_authenticator import IntegrationAuthenticator

logger = logging.getLogger(__name__)


class IntegrationClient:
    """
    Client for the marketplace Integration API.

    Uses /listings/query for listings and /transactions/query with the
    booking relationship included for bookings. The blocking HTTP calls are
    exposed to the async service through worker threads.
    """

    def __init__(
        self,
        authenticator: IntegrationAuthenticator,
        base_url: str,
        timezone: str = "UTC",
        per_page: int = 100,
        timeout: float = 30,
        session: requests.Session | None = None,
    ):
        """
        Initialize the Integration API client.

        Args:
            authenticator: Provides bearer tokens
            base_url: Integration API base URL
            timezone: IANA timezone bookings are converted to
            per_page: Page size for transaction queries
            timeout: Request timeout in seconds
            session: Optional requests session to reuse
        """
        self.authenticator = authenticator
        self.base_url = base_url.rstrip("/")
        self.timezone = timezone
        self.per_page = per_page
        self.timeout = timeout
        self.session = session or requests.Session()

    async def query_listings(self, params: Mapping[str, Any]) -> List[Listing]:
        return await asyncio.to_thread(self.get_listings, params)

    async def fetch_bookings(self, listing: Listing) -> List[Booking]:
        return await asyncio.to_thread(self.get_bookings, listing.listing_id)

    def get_listings(self, params: Mapping[str, Any]) -> List[Listing]:
        """
        Query listings.

        Args:
            params: Query parameters passed through to the API

        Returns:
            List of Listing objects in API order

        Raises:
            MarketplaceAPIError: If the API call fails
        """
        data = self._request("GET", "/listings/query", params=self._serialize_params(params))
        return [Listing.from_api(record) for record in data.get("data", [])]

    def get_bookings(self, listing_id: str) -> List[Booking]:
        """
        Fetch all bookings of a listing, following pagination.

        Raises:
            MarketplaceAPIError: If the API call fails
        """
        bookings: List[Booking] = []
        page = 1

        while True:
            data = self._request(
                "GET",
                "/transactions/query",
                params={
                    "listingId": listing_id,
                    "include": "booking",
                    "page": page,
                    "perPage": self.per_page,
                },
            )
            bookings.extend(self._parse_included_bookings(data))

            total_pages = (data.get("meta") or {}).get("totalPages") or 1
            if page >= total_pages:
                break
            page += 1

        logger.debug("Fetched %d bookings for listing %s", len(bookings), listing_id)
        return bookings

    def update_listing_limitations(self, listing_id: str, limits: LimitationConfig) -> Listing:
        """
        Store booking limitations in the listing's public data.

        Raises:
            MarketplaceAPIError: If the API call fails
        """
        payload = {
            "id": listing_id,
            "publicData": {"bookingLimitations": limits.to_public_data()},
        }
        data = self._request("POST", "/listings/update", json=payload)
        return Listing.from_api(data.get("data") or {})

    def test_connection(self) -> Dict[str, Any]:
        """
        Test the connection and authentication by fetching the marketplace.

        Raises:
            MarketplaceAPIError: If connection test fails
        """
        return self._request("GET", "/marketplace/show")

    def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        """
        Send an authenticated request and decode the JSON body.

        A 401 drops the cached token and retries once with a fresh one.
        """
        try:
            response = self._send(method, path, self.authenticator.get_access_token(), **kwargs)

            if response.status_code == 401:
                logger.info("%s %s rejected the access token, re-authenticating", method, path)
                self.authenticator.clear_cache()
                response = self._send(method, path, self.authenticator.get_access_token(), **kwargs)

            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as exc:
            raise MarketplaceAPIError(f"{method} {path} failed: {exc}") from exc
        except ValueError as exc:
            raise MarketplaceAPIError(f"{method} {path} returned invalid JSON: {exc}") from exc

    def _send(self, method: str, path: str, token: str, **kwargs: Any) -> requests.Response:
        headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        return self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            timeout=self.timeout,
            **kwargs,
        )

    def _parse_included_bookings(self, response_data: Mapping[str, Any]) -> List[Booking]:
        """
        Parse the booking resources included in a transactions response.

        Response format:
        {
            "data": [{"id": {...}, "type": "transaction", ...}],
            "included": [
                {
                    "id": {"uuid": "..."},
                    "type": "booking",
                    "attributes": {"start": "...", "end": "..."}
                }
            ]
        }
        """
        bookings: List[Booking] = []

        for item in response_data.get("included", []):
            if item.get("type") != "booking":
                continue

            try:
                attributes = item["attributes"]
                booking_id = item.get("id")
                if isinstance(booking_id, Mapping):
                    booking_id = booking_id.get("uuid")

                bookings.append(
                    Booking(
                        start=self._parse_datetime(attributes["start"]),
                        end=self._parse_datetime(attributes["end"]),
                        booking_id=booking_id,
                    )
                )
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Could not parse booking item: %s", exc)
                continue

        return bookings

    def _parse_datetime(self, datetime_str: str) -> DateTime:
        """
        Parse an ISO 8601 string to a pendulum DateTime in the client timezone.
        """
        dt = pendulum.parse(datetime_str)

        if isinstance(dt, DateTime):
            return dt.in_timezone(self.timezone)

        raise ValueError(f"Could not parse datetime: {datetime_str}")

    @staticmethod
    def _serialize_params(params: Mapping[str, Any]) -> Dict[str, Any]:
        serialized: Dict[str, Any] = {}
        for key, value in params.items():
            if value is None:
                continue
            if isinstance(value, DateTime):
                value = value.to_iso8601_string()
            elif isinstance(value, (list, tuple)):
                value = ",".join(str(item) for item in value)
            serialized[key] = value
        return serialized


def build_integration_client(config: Any, session: Optional[requests.Session] = None) -> IntegrationClient:
    """Create an authenticated client from an AppConfig."""
    session = session or requests.Session()
    authenticator = IntegrationAuthenticator(
        client_id=config.client_id,
        client_secret=config.client_secret,
        auth_url=config.auth_url,
        timeout=config.fetch.request_timeout_seconds,
        session=session,
    )
    return IntegrationClient(
        authenticator=authenticator,
        base_url=config.api_base_url,
        timezone=config.timezone,
        per_page=config.fetch.per_page,
        timeout=config.fetch.request_timeout_seconds,
        session=session,
    )
