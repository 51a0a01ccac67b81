"""
Application service for filtering listings by their booking limitations.

The service coordinates fetching listings and bookings via a marketplace client
adapter and delegates the visibility decision to the domain-level
``WeekPartitioner`` and ``VisibilityDecider``. The client dependency is a
simple protocol so tests can plug in a stub.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..domain.exceptions import BookingFetchError, InvalidRangeError
from ..domain.models import Booking, Listing, WeekBounds
from ..domain.visibility import VisibilityDecider
from ..domain.week_partitioner import WeekPartitioner

logger = logging.getLogger(__name__)


FAILURE_POLICIES = ("fail", "include", "exclude")

BookingFetcher = Callable[[Listing], Awaitable[List[Booking]]]


class MarketplaceClientProtocol(Protocol):
    """Protocol describing the marketplace client behaviour needed by the service."""

    async def query_listings(self, params: Mapping[str, Any]) -> List[Listing]:
        """Return the listings matching the query parameters."""

    async def fetch_bookings(self, listing: Listing) -> List[Booking]:
        """Return every booking of the listing."""


@dataclass
class FilterOutcome:
    """
    Result of filtering a batch of listings.

    ``aborted`` is set when a fetch failure cancelled the whole batch; the
    failures are always reported, whatever the policy.
    """
    listings: List[Listing] = field(default_factory=list)
    failures: List[BookingFetchError] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.aborted


def transform_bounds(bounds: Mapping[str, Any]) -> str:
    """
    Convert a ``{ne: {lat, lng}, sw: {lat, lng}}`` mapping to the API string form.

    Example: {"ne": {"lat": 1, "lng": 2}, "sw": {"lat": 3, "lng": 4}} -> "1,2,3,4"
    """
    ne = bounds["ne"]
    sw = bounds["sw"]
    return f"{ne['lat']},{ne['lng']},{sw['lat']},{sw['lng']}"


class ListingFilterService:
    """
    Orchestrates listing/booking retrieval and the visibility decision.

    Every booking fetch of a batch runs concurrently; results are joined by
    listing position so the output keeps the input order.
    """

    def __init__(
        self,
        client: MarketplaceClientProtocol,
        partitioner: WeekPartitioner,
        decider: VisibilityDecider | None = None,
        *,
        fetch_timeout: Optional[float] = None,
        on_failure: str = "fail",
    ) -> None:
        if on_failure not in FAILURE_POLICIES:
            raise ValueError(
                f"on_failure must be one of {', '.join(FAILURE_POLICIES)}, got {on_failure!r}"
            )

        self._client = client
        self._partitioner = partitioner
        self._decider = decider or VisibilityDecider()
        self._fetch_timeout = fetch_timeout
        self._on_failure = on_failure

    async def find_visible_listings(self, params: Mapping[str, Any]) -> FilterOutcome:
        """
        Query listings and keep those whose limits leave room in the range.

        Without both ``start`` and ``end`` in the params every listing passes
        through unfiltered.
        """
        query: Dict[str, Any] = dict(params)
        if query.get("bounds") and isinstance(query["bounds"], Mapping):
            query["bounds"] = transform_bounds(query["bounds"])

        listings = await self._client.query_listings(query)

        if not (query.get("start") and query.get("end")):
            logger.debug("No date range in query, returning %d listings unfiltered", len(listings))
            return FilterOutcome(listings=list(listings))

        return await self.filter_by_limitations(
            start=query["start"],
            end=query["end"],
            listings=listings,
        )

    async def filter_by_limitations(
        self,
        *,
        start: Any,
        end: Any,
        listings: Sequence[Listing],
        fetch_bookings: Optional[BookingFetcher] = None,
    ) -> FilterOutcome:
        """
        Keep the listings that are visible for the query range.

        Args:
            start: Query start (ISO string, date or datetime)
            end: Query end, exclusive by convention
            listings: Listings to filter
            fetch_bookings: Coroutine function returning a listing's bookings;
                defaults to the client

        Returns:
            FilterOutcome with the visible listings in input order

        Raises:
            InvalidRangeError: If start or end cannot be parsed
        """
        listing_list = list(listings)

        if start is None or end is None:
            return FilterOutcome(listings=listing_list)

        bounds = self._partitioner.partition(
            self.parse_date(start, self._partitioner.timezone),
            self.parse_date(end, self._partitioner.timezone),
            exclude_end=True,
        )

        results = await asyncio.gather(
            *(self._fetch_bookings(listing, fetch_bookings) for listing in listing_list),
            return_exceptions=True,
        )

        for result in results:
            if isinstance(result, BaseException) and not isinstance(result, BookingFetchError):
                raise result

        failures = [result for result in results if isinstance(result, BookingFetchError)]

        if failures and self._on_failure == "fail":
            logger.error(
                "Aborting limitation filter: %d of %d booking fetches failed",
                len(failures),
                len(listing_list),
            )
            return FilterOutcome(failures=failures, aborted=True)

        visible: List[Listing] = []

        for listing, result in zip(listing_list, results):
            if isinstance(result, BookingFetchError):
                logger.warning("%s; policy is %r", result, self._on_failure)
                if self._on_failure == "include":
                    visible.append(listing)
                continue

            if self.is_listing_visible(listing, result, bounds):
                visible.append(listing)

        logger.info("%d of %d listings visible", len(visible), len(listing_list))
        return FilterOutcome(listings=visible, failures=failures)

    def is_listing_visible(
        self,
        listing: Listing,
        bookings: Sequence[Booking],
        bounds: WeekBounds,
    ) -> bool:
        """
        Restrict bookings to the query range and ask the decider.

        Bookings are moved into the partition timezone first so weekday
        grouping follows the same calendar as the week windows.
        """
        timezone = self._partitioner.timezone
        localized = [
            Booking(
                start=pendulum.instance(booking.start).in_timezone(timezone),
                end=pendulum.instance(booking.end).in_timezone(timezone),
                booking_id=booking.booking_id,
            )
            for booking in bookings
        ]
        bookings_in_range = [
            booking for booking in localized
            if bounds.contains(booking.start, booking.end)
        ]
        return self._decider.is_visible(listing, bookings_in_range, bounds)

    async def _fetch_bookings(
        self,
        listing: Listing,
        fetch_bookings: Optional[BookingFetcher] = None,
    ) -> List[Booking]:
        """Fetch one listing's bookings, wrapping any failure in BookingFetchError."""
        fetch = fetch_bookings or self._client.fetch_bookings

        try:
            if self._fetch_timeout is None:
                bookings = await fetch(listing)
            else:
                bookings = await asyncio.wait_for(
                    fetch(listing),
                    timeout=self._fetch_timeout,
                )
        except asyncio.TimeoutError as exc:
            raise BookingFetchError(
                listing.listing_id,
                TimeoutError(f"no response after {self._fetch_timeout}s"),
            ) from exc
        except Exception as exc:
            raise BookingFetchError(listing.listing_id, exc) from exc

        return list(bookings or [])

    @staticmethod
    def parse_date(value: Any, timezone: str) -> DateTime:
        """
        Parse a date-like query value into a DateTime in the given timezone.

        Raises:
            InvalidRangeError: If the value is not a date or parseable string
        """
        if isinstance(value, DateTime):
            return value.in_timezone(timezone)

        if isinstance(value, datetime):
            return pendulum.instance(value, tz=timezone)

        if isinstance(value, date):
            return pendulum.datetime(value.year, value.month, value.day, tz=timezone)

        if isinstance(value, str):
            try:
                parsed = pendulum.parse(value, tz=timezone)
            except (ValueError, TypeError) as exc:
                raise InvalidRangeError(f"Could not parse date: {value!r}") from exc

            if isinstance(parsed, DateTime):
                return parsed.in_timezone(timezone)

        raise InvalidRangeError(f"Could not parse date: {value!r}")
