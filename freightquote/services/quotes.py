import logging
import math

from freightquote.core.errors import InvalidWeight, MissingField, RouteUnavailable, UnconfirmedLocation
from freightquote.core.metrics import quotes_created
from freightquote.schemas.quote import Quote, QuoteRequest
from freightquote.services.distance import DistanceResolver
from freightquote.services.rates import compute_rate, estimate_days

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("origin", "destination", "equipment_type", "weight", "pickup_date")


def validate_request(req: QuoteRequest) -> None:
    """Reject incomplete or inconsistent requests before any lookup happens."""
    for field in REQUIRED_FIELDS:
        value = getattr(req, field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingField("All fields are required.")

    if not math.isfinite(req.weight) or req.weight <= 0:
        raise InvalidWeight("Invalid weight value.")

    if req.confirmed_origin is not None and req.confirmed_origin != req.origin:
        raise UnconfirmedLocation("Invalid locations, please select from dropdown.")
    if req.confirmed_destination is not None and req.confirmed_destination != req.destination:
        raise UnconfirmedLocation("Invalid locations, please select from dropdown.")


class QuoteService:
    """Builds quotes from shipment parameters; recording them is the ledger's job."""

    def __init__(self, resolver: DistanceResolver):
        self.resolver = resolver

    async def create_quote(self, req: QuoteRequest) -> Quote:
        validate_request(req)

        distance = await self.resolver.resolve(req.origin, req.destination, hint=req.cache_distance)
        if distance is None:
            raise RouteUnavailable(f"No route between {req.origin} and {req.destination} available.")

        breakdown = compute_rate(distance, req.weight, req.equipment_type)
        quote = Quote(
            origin=req.origin,
            destination=req.destination,
            equipment_type=req.equipment_type,
            weight=req.weight,
            pickup_date=req.pickup_date,
            distance=distance,
            days=estimate_days(distance),
            **breakdown.model_dump(),
        )

        quotes_created.labels(equipment_type=str(quote.equipment_type)).inc()
        logger.info(
            f"Quoted {quote.origin} -> {quote.destination} ({quote.equipment_type}, "
            f"{quote.distance:.1f} km): {quote.total:.2f}"
        )
        return quote
