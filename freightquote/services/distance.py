"""Distance resolution between two locations.

``DistanceResolver.resolve`` answers from a caller-supplied hint, then from
the symmetric ``DistanceCache``, and only then calls the ``DistanceLookup``
collaborator (Google Distance Matrix in production). A resolution makes at
most one external call and never retries. ``None`` means there is no
drivable route between the two locations.
"""
import logging
import math
from typing import Optional, Protocol

import httpx

from freightquote.core.config import settings
from freightquote.core.errors import InvalidInputError, LookupFailure, PersistenceFailure
from freightquote.core.metrics import distance_cache_hits, distance_cache_misses, distance_lookups
from freightquote.core.store import KeyValueStore
from freightquote.utils.hashing import pair_key

logger = logging.getLogger(__name__)

NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}


class DistanceLookup(Protocol):
    async def distance_meters(self, origin: str, destination: str) -> Optional[float]: ...


class GoogleDistanceMatrix:

    def __init__(
        self,
        api_key: str,
        url: str = settings.DISTANCE_MATRIX_URL,
        timeout: float = settings.DISTANCE_LOOKUP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self.transport = transport

    async def distance_meters(self, origin: str, destination: str) -> Optional[float]:
        if not self.api_key:
            raise LookupFailure("Distance lookup is not configured.")

        params = {
            "origins": origin,
            "destinations": destination,
            "units": "metric",
            "key": self.api_key,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            distance_lookups.labels(outcome="error").inc()
            logger.warning(f"Distance lookup timed out for {origin} -> {destination}")
            raise LookupFailure("Distance lookup timed out.") from e
        except (httpx.HTTPError, ValueError) as e:
            distance_lookups.labels(outcome="error").inc()
            logger.warning(f"Distance lookup failed for {origin} -> {destination}: {e}")
            raise LookupFailure("Distance lookup failed.") from e

        return self._parse(data, origin, destination)

    def _parse(self, data: dict, origin: str, destination: str) -> Optional[float]:
        status = data.get("status") if isinstance(data, dict) else None
        if status != "OK":
            distance_lookups.labels(outcome="error").inc()
            logger.warning(f"Distance Matrix returned status {status} for {origin} -> {destination}")
            raise LookupFailure(f"Distance lookup failed with status {status}.")

        try:
            element = data["rows"][0]["elements"][0]
            element_status = element.get("status")
            if element_status in NO_ROUTE_STATUSES:
                distance_lookups.labels(outcome="no_route").inc()
                return None
            if element_status != "OK":
                raise LookupFailure(f"Distance lookup failed with status {element_status}.")
            meters = float(element["distance"]["value"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            distance_lookups.labels(outcome="error").inc()
            raise LookupFailure("Distance lookup returned an unexpected response.") from e
        except LookupFailure:
            distance_lookups.labels(outcome="error").inc()
            raise

        distance_lookups.labels(outcome="ok").inc()
        return meters


class DistanceCache:
    """Kilometers per unordered location pair; entries never expire.

    Store problems degrade to a miss or an unwritten entry and are logged.
    """

    def __init__(self, store: KeyValueStore, prefix: str = settings.DISTANCE_CACHE_PREFIX):
        self.store = store
        self.prefix = prefix

    def key(self, origin: str, destination: str) -> str:
        return pair_key(self.prefix, origin, destination)

    async def get(self, origin: str, destination: str) -> Optional[float]:
        key = self.key(origin, destination)
        try:
            cached = await self.store.get(key)
        except PersistenceFailure as e:
            logger.warning(f"Distance cache read failed: {e}")
            return None
        if cached is None:
            return None
        try:
            distance_km = float(cached)
        except ValueError:
            distance_km = None
        if distance_km is None or not math.isfinite(distance_km) or distance_km < 0:
            logger.warning(f"Ignoring unreadable distance cache entry {key}: {cached!r}")
            return None
        return distance_km

    async def put(self, origin: str, destination: str, distance_km: float) -> None:
        try:
            await self.store.set(self.key(origin, destination), str(distance_km))
        except PersistenceFailure as e:
            logger.warning(f"Distance cache write failed: {e}")


class DistanceResolver:

    def __init__(self, lookup: DistanceLookup, cache: DistanceCache):
        self.lookup = lookup
        self.cache = cache

    async def resolve(self, origin: str, destination: str, hint: Optional[float] = None) -> Optional[float]:
        if hint is not None:
            if not math.isfinite(hint) or hint < 0:
                raise InvalidInputError("Cached distance must be a finite, non-negative number.")
            distance_cache_hits.labels(source="hint").inc()
            return hint

        cached = await self.cache.get(origin, destination)
        if cached is not None:
            distance_cache_hits.labels(source="cache").inc()
            return cached

        distance_cache_misses.inc()
        meters = await self.lookup.distance_meters(origin, destination)
        if meters is None:
            logger.info(f"No route between {origin} and {destination}")
            return None

        distance_km = meters / 1000
        await self.cache.put(origin, destination, distance_km)
        return distance_km
