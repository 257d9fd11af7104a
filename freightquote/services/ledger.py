"""Ordered, persisted ledger of past quotes.

The ledger is kept sorted by pickup date (stable, so quotes sharing a date
stay in insertion order) and is rewritten in full to the store after every
mutation. Mutations are serialized by a lock and swap the in-memory ledger
only after the store write succeeded, so memory and store always agree.
"""
import asyncio
import logging
import math
from typing import List, Sequence, Tuple, TypeVar

from pydantic import TypeAdapter, ValidationError

from freightquote.core.config import settings
from freightquote.core.enums import LedgerOperation
from freightquote.core.errors import InvalidInputError, LedgerIndexError, PersistenceFailure
from freightquote.core.metrics import ledger_size, track_ledger_operation
from freightquote.core.store import KeyValueStore
from freightquote.schemas.ledger import FilterCriteria, LedgerPage
from freightquote.schemas.quote import Quote

logger = logging.getLogger(__name__)

T = TypeVar("T")

_quotes_adapter = TypeAdapter(List[Quote])


def _sorted(quotes: Sequence[Quote]) -> List[Quote]:
    return sorted(quotes, key=lambda q: q.pickup_date)


def _matches(quote: Quote, criteria: FilterCriteria) -> bool:
    if criteria.origin and criteria.origin.lower() not in quote.origin.lower():
        return False
    if criteria.destination and criteria.destination.lower() not in quote.destination.lower():
        return False
    return criteria.equipment is None or quote.equipment_type == criteria.equipment


def paginate(sequence: Sequence[T], page_size: int, page: int) -> List[T]:
    """Contiguous 1-based page of ``sequence``; empty when out of range."""
    if page_size < 1:
        raise InvalidInputError("Page size must be at least 1.")
    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(sequence[start:start + page_size])


def total_pages(count: int, page_size: int) -> int:
    if page_size < 1:
        raise InvalidInputError("Page size must be at least 1.")
    return math.ceil(count / page_size)


class QuoteLedger:

    paginate = staticmethod(paginate)

    def __init__(self, store: KeyValueStore, key: str = settings.LEDGER_KEY, quotes: Sequence[Quote] = ()):
        self.store = store
        self.key = key
        self._quotes: Tuple[Quote, ...] = tuple(_sorted(quotes))
        self._lock = asyncio.Lock()

    @classmethod
    @track_ledger_operation(LedgerOperation.LOAD.value)
    async def load(cls, store: KeyValueStore, key: str = settings.LEDGER_KEY) -> "QuoteLedger":
        raw = await store.get(key)
        if raw is None:
            ledger = cls(store, key)
            ledger_size.set(0)
            return ledger
        try:
            quotes = _quotes_adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Stored quote ledger under {key} is unreadable: {e}")
            raise PersistenceFailure("Stored quotes are corrupt.") from e
        logger.info(f"Loaded {len(quotes)} quotes from {key}")
        ledger = cls(store, key, quotes)
        ledger_size.set(len(ledger))
        return ledger

    @property
    def quotes(self) -> Tuple[Quote, ...]:
        return self._quotes

    def __len__(self):
        return len(self._quotes)

    async def _commit(self, quotes: List[Quote]) -> List[Quote]:
        await self.store.set(self.key, _quotes_adapter.dump_json(quotes, by_alias=True).decode("utf-8"))
        self._quotes = tuple(quotes)
        ledger_size.set(len(quotes))
        return list(quotes)

    @track_ledger_operation(LedgerOperation.INSERT.value)
    async def insert(self, quote: Quote) -> List[Quote]:
        async with self._lock:
            quotes = await self._commit(_sorted([*self._quotes, quote]))
        logger.info(f"Recorded quote {quote.origin} -> {quote.destination} for {quote.pickup_date}")
        return quotes

    async def _remove(self, index: int) -> List[Quote]:
        # Caller holds the lock.
        if not 0 <= index < len(self._quotes):
            raise LedgerIndexError(f"No quote at position {index}.")
        remaining = list(self._quotes)
        removed = remaining.pop(index)
        quotes = await self._commit(remaining)
        logger.info(f"Deleted quote {removed.origin} -> {removed.destination} for {removed.pickup_date}")
        return quotes

    @track_ledger_operation(LedgerOperation.DELETE.value)
    async def delete_at(self, index: int) -> List[Quote]:
        async with self._lock:
            return await self._remove(index)

    def positions(self, criteria: FilterCriteria) -> List[int]:
        """Ledger positions of the quotes matching ``criteria``, in ledger order."""
        return [i for i, quote in enumerate(self._quotes) if _matches(quote, criteria)]

    def filter(self, criteria: FilterCriteria) -> List[Quote]:
        return [self._quotes[i] for i in self.positions(criteria)]

    def locate(self, criteria: FilterCriteria, page_size: int, page: int, view_index: int) -> int:
        """Map an index within a filtered, paginated view to its ledger position."""
        visible = paginate(self.positions(criteria), page_size, page)
        if not 0 <= view_index < len(visible):
            raise LedgerIndexError(f"No quote at position {view_index} on page {page}.")
        return visible[view_index]

    def view(self, criteria: FilterCriteria, page_size: int, page: int) -> LedgerPage:
        matching = self.filter(criteria)
        return LedgerPage(
            items=paginate(matching, page_size, page),
            page=page,
            page_size=page_size,
            total_items=len(matching),
            total_pages=total_pages(len(matching), page_size),
        )

    @track_ledger_operation(LedgerOperation.DELETE.value)
    async def delete_from_view(self, criteria: FilterCriteria, page_size: int, page: int, view_index: int) -> LedgerPage:
        """Delete the ``view_index``-th quote of a displayed page.

        Returns the page to display next, moved back when the deletion
        emptied the last page.
        """
        async with self._lock:
            await self._remove(self.locate(criteria, page_size, page, view_index))
            remaining_pages = total_pages(len(self.filter(criteria)), page_size)
            return self.view(criteria, page_size, max(1, min(page, remaining_pages)))
