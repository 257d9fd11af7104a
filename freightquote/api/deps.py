from typing import Optional

from fastapi import Query, Request
from pydantic import ValidationError

from freightquote.core.config import settings
from freightquote.core.enums import EquipmentType
from freightquote.core.errors import InvalidInputError, PersistenceFailure
from freightquote.schemas.ledger import FilterCriteria
from freightquote.services.ledger import QuoteLedger
from freightquote.services.quotes import QuoteService


def get_ledger(request: Request) -> QuoteLedger:
    ledger = getattr(request.app.state, "ledger", None)
    if ledger is None:
        raise PersistenceFailure("Quote ledger is not loaded.")
    return ledger


def get_quote_service(request: Request) -> QuoteService:
    return request.app.state.quote_service


def get_filter_criteria(
    origin: str = Query(""),
    destination: str = Query(""),
    equipment: Optional[str] = Query(None, description=f"One of {[e.value for e in EquipmentType]} or 'any'"),
) -> FilterCriteria:
    try:
        return FilterCriteria(origin=origin, destination=destination, equipment=equipment)
    except ValidationError:
        raise InvalidInputError(f"Unknown equipment type: {equipment!r}")


class PageParams:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        page_size: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    ):
        self.page = page
        self.page_size = page_size
