import pytest
import asyncio
from datetime import date
from typing import Optional

import fakeredis
from httpx import ASGITransport, AsyncClient

from freightquote.main import app
from freightquote.core.enums import EquipmentType
from freightquote.core.errors import LookupFailure
from freightquote.core.store import RedisStore
from freightquote.schemas.quote import Quote
from freightquote.services.distance import DistanceCache, DistanceResolver
from freightquote.services.ledger import QuoteLedger
from freightquote.services.quotes import QuoteService
from freightquote.services.rates import compute_rate, estimate_days


class FakeDistanceLookup:
    """Distance lookup double: answers from a table of meters and records calls"""

    def __init__(self, meters: Optional[dict] = None, default: Optional[float] = 100000.0):
        self.meters = meters or {}
        self.default = default
        self.calls = []
        self.error: Optional[Exception] = None

    async def distance_meters(self, origin: str, destination: str) -> Optional[float]:
        self.calls.append((origin, destination))
        if self.error is not None:
            raise self.error
        return self.meters.get((origin, destination), self.default)


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_redis(redis_server):
    return fakeredis.FakeAsyncRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def store(fake_redis):
    return RedisStore(fake_redis)


@pytest.fixture
def lookup():
    return FakeDistanceLookup()


@pytest.fixture
def failing_lookup():
    lookup = FakeDistanceLookup()
    lookup.error = LookupFailure("Distance lookup failed.")
    return lookup


@pytest.fixture
def distance_cache(store):
    return DistanceCache(store, prefix="distance")


@pytest.fixture
def resolver(lookup, distance_cache):
    return DistanceResolver(lookup, distance_cache)


@pytest.fixture
def quote_service(resolver):
    return QuoteService(resolver)


@pytest.fixture
def ledger(store):
    return QuoteLedger(store, key="quotes")


@pytest.fixture
def make_quote():
    def _make_quote(
        origin="Toronto, ON, Canada",
        destination="Montreal, QC, Canada",
        equipment_type=EquipmentType.DRY_VAN,
        weight=5000.0,
        pickup_date=date(2025, 1, 15),
        distance=541.0,
    ) -> Quote:
        breakdown = compute_rate(distance, weight, equipment_type)
        return Quote(
            origin=origin,
            destination=destination,
            equipment_type=equipment_type,
            weight=weight,
            pickup_date=pickup_date,
            distance=distance,
            days=estimate_days(distance),
            **breakdown.model_dump(),
        )

    return _make_quote


@pytest.fixture
def valid_quote_data():
    return {
        "origin": "Toronto, ON, Canada",
        "destination": "Montreal, QC, Canada",
        "equipmentType": "dry_van",
        "weight": 5000,
        "pickupDate": "2025-03-01",
    }


@pytest.fixture
async def test_client(quote_service, ledger):
    app.state.quote_service = quote_service
    app.state.ledger = ledger
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.state.quote_service = None
    app.state.ledger = None


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to rate calculation"
    )
    config.addinivalue_line(
        "markers", "distance: marks tests related to distance resolution"
    )
    config.addinivalue_line(
        "markers", "ledger: marks tests related to the quote ledger"
    )
    config.addinivalue_line(
        "markers", "api: marks tests that go through the HTTP layer"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify test collection to handle asyncio tests
    """
    for item in items:
        if asyncio.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)
