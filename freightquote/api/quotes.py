"""Quote creation and quote ledger endpoints"""
from fastapi import APIRouter, Depends

from freightquote.api.deps import PageParams, get_filter_criteria, get_ledger, get_quote_service
from freightquote.schemas.ledger import FilterCriteria, LedgerPage
from freightquote.schemas.quote import ErrorResponse, QuoteRequest, QuoteResponse, RateCard
from freightquote.services.ledger import QuoteLedger
from freightquote.services.quotes import QuoteService
from freightquote.services.rates import rate_card

router = APIRouter(prefix="/quotes", tags=["quotes"])

ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (400, 404, 502, 503)}


@router.post("/", response_model=QuoteResponse, status_code=201, responses=ERROR_RESPONSES)
async def create_quote(
    req: QuoteRequest,
    service: QuoteService = Depends(get_quote_service),
    ledger: QuoteLedger = Depends(get_ledger),
):
    quote = await service.create_quote(req)
    await ledger.insert(quote)
    return QuoteResponse(quote=quote)


@router.post("/calc", response_model=QuoteResponse, responses=ERROR_RESPONSES)
async def calc_quote(req: QuoteRequest, service: QuoteService = Depends(get_quote_service)):
    quote = await service.create_quote(req)
    return QuoteResponse(quote=quote)


@router.get("/rates", response_model=RateCard)
async def get_rate_card():
    return rate_card()


@router.get("/", response_model=LedgerPage)
async def list_quotes(
    criteria: FilterCriteria = Depends(get_filter_criteria),
    paging: PageParams = Depends(),
    ledger: QuoteLedger = Depends(get_ledger),
):
    return ledger.view(criteria, paging.page_size, paging.page)


@router.delete("/{view_index}", response_model=LedgerPage, responses=ERROR_RESPONSES)
async def delete_quote(
    view_index: int,
    criteria: FilterCriteria = Depends(get_filter_criteria),
    paging: PageParams = Depends(),
    ledger: QuoteLedger = Depends(get_ledger),
):
    """Delete the ``view_index``-th quote shown on the given filtered page."""
    return await ledger.delete_from_view(criteria, paging.page_size, paging.page, view_index)
