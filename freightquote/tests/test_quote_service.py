from datetime import date

import pytest
from pydantic import ValidationError

from freightquote.core.enums import EquipmentType
from freightquote.core.errors import (
    InvalidWeight,
    LookupFailure,
    MissingField,
    RouteUnavailable,
    UnconfirmedLocation,
)
from freightquote.schemas.quote import QuoteRequest
from freightquote.services.distance import DistanceResolver
from freightquote.services.quotes import QuoteService


def _request(**overrides) -> QuoteRequest:
    data = {
        "origin": "Toronto, ON, Canada",
        "destination": "Montreal, QC, Canada",
        "equipment_type": "reefer",
        "weight": 15000,
        "pickup_date": "2025-03-01",
    }
    data.update(overrides)
    return QuoteRequest(**data)


class TestCreateQuote:

    async def test_builds_quote_from_lookup(self, quote_service, lookup):
        lookup.meters[("Toronto, ON, Canada", "Montreal, QC, Canada")] = 100_000

        quote = await quote_service.create_quote(_request())

        assert quote.origin == "Toronto, ON, Canada"
        assert quote.destination == "Montreal, QC, Canada"
        assert quote.equipment_type == EquipmentType.REEFER
        assert quote.weight == 15000
        assert quote.pickup_date == date(2025, 3, 1)
        assert quote.distance == pytest.approx(100.0)
        assert quote.days == 1
        assert quote.total == pytest.approx(332.10896)
        assert quote.total == quote.base_rate + quote.equipment_charge + quote.fuel_surcharge + quote.weight_factor

    async def test_cache_hint_avoids_lookup(self, quote_service, lookup):
        quote = await quote_service.create_quote(_request(cache_distance=1083))

        assert lookup.calls == []
        assert quote.distance == 1083
        assert quote.days == 3

    async def test_hint_as_string_is_accepted(self, quote_service, lookup):
        quote = await quote_service.create_quote(_request(cache_distance="542"))
        assert quote.days == 2
        assert lookup.calls == []

    async def test_second_quote_uses_cached_distance(self, quote_service, lookup):
        await quote_service.create_quote(_request())
        await quote_service.create_quote(_request(
            origin="Montreal, QC, Canada",
            destination="Toronto, ON, Canada",
        ))
        assert len(lookup.calls) == 1

    async def test_matching_confirmed_locations(self, quote_service):
        quote = await quote_service.create_quote(_request(
            confirmed_origin="Toronto, ON, Canada",
            confirmed_destination="Montreal, QC, Canada",
        ))
        assert quote.origin == "Toronto, ON, Canada"

    async def test_quote_is_immutable(self, quote_service):
        quote = await quote_service.create_quote(_request())
        with pytest.raises(ValidationError):
            quote.total = 0


class TestCreateQuoteValidation:

    @pytest.mark.parametrize("field", ["origin", "destination", "equipment_type", "weight", "pickup_date"])
    async def test_missing_field(self, quote_service, lookup, field):
        with pytest.raises(MissingField):
            await quote_service.create_quote(_request(**{field: None}))
        assert lookup.calls == []

    @pytest.mark.parametrize("field", ["origin", "destination"])
    async def test_blank_location(self, quote_service, lookup, field):
        with pytest.raises(MissingField):
            await quote_service.create_quote(_request(**{field: "   "}))
        assert lookup.calls == []

    @pytest.mark.parametrize("weight", [0, -10, float("inf"), float("-inf"), float("nan")])
    async def test_invalid_weight(self, quote_service, lookup, weight):
        with pytest.raises(InvalidWeight):
            await quote_service.create_quote(_request(weight=weight))
        assert lookup.calls == []

    async def test_edited_origin_after_selection(self, quote_service, lookup):
        with pytest.raises(UnconfirmedLocation):
            await quote_service.create_quote(_request(
                origin="Toronto",
                confirmed_origin="Toronto, ON, Canada",
            ))
        assert lookup.calls == []

    async def test_edited_destination_after_selection(self, quote_service, lookup):
        with pytest.raises(UnconfirmedLocation):
            await quote_service.create_quote(_request(confirmed_destination="Montreal, QC"))
        assert lookup.calls == []


class TestCreateQuoteRouteErrors:

    async def test_no_route(self, quote_service, lookup, distance_cache):
        lookup.default = None

        with pytest.raises(RouteUnavailable) as exc:
            await quote_service.create_quote(_request(destination="Honolulu, HI, USA"))

        assert "Honolulu, HI, USA" in str(exc.value)
        assert await distance_cache.get("Toronto, ON, Canada", "Honolulu, HI, USA") is None

    async def test_lookup_failure(self, failing_lookup, distance_cache):
        service = QuoteService(DistanceResolver(failing_lookup, distance_cache))

        with pytest.raises(LookupFailure):
            await service.create_quote(_request())

        assert len(failing_lookup.calls) == 1
        assert await distance_cache.get("Toronto, ON, Canada", "Montreal, QC, Canada") is None
