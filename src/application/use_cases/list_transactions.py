"""Sales history use cases."""

from datetime import datetime, tzinfo

from src.application.dto.requests import ListTransactionsRequest
from src.config import get_logger, get_settings
from src.core.entities.timestamps import format_timestamp, utc_now
from src.core.entities.transaction import Transaction
from src.core.interfaces.document_store import Collection, IDocumentStore, QueryFilter
from src.core.services.dashboard_aggregator import window_start

logger = get_logger(__name__)


def matches_search(transaction: Transaction, term: str) -> bool:
    """Case-insensitive match on customer name, mobile or any product name."""
    term = term.strip().lower()
    if not term:
        return True
    customer = transaction.customer
    if customer is not None:
        for value in (customer.name, customer.mobile):
            if value and term in value.lower():
                return True
    return any(term in line.product_name.lower() for line in transaction.lines)


class ListTransactionsUseCase:
    """List committed transactions, newest first."""

    def __init__(
        self,
        store: IDocumentStore | None = None,
        tz: tzinfo | None = None,
    ):
        self._store = store
        # None falls back to the configured zone, then the system zone
        self._tz = tz if tz is not None else get_settings().engine.zone

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(
        self,
        request: ListTransactionsRequest | None = None,
        now: datetime | None = None,
    ) -> list[Transaction]:
        request = request or ListTransactionsRequest()
        now = now or utc_now()

        filters: list[QueryFilter] = []
        start = window_start(request.window, now, self._tz)
        if start is not None:
            # Compare in the stored fixed-width form
            filters.append(QueryFilter("created_at", ">=", format_timestamp(start)))
        if request.actor:
            filters.append(QueryFilter("actor", "==", request.actor))
        if request.payment_type is not None:
            filters.append(QueryFilter("payment_type", "==", request.payment_type))

        store = await self._get_store()
        docs = await store.query(
            Collection.TRANSACTIONS,
            filters=filters,
            order_by="created_at",
            descending=True,
            # Free-text search is applied after loading
            limit=None if request.search else request.limit,
        )
        transactions = [Transaction.from_document(doc) for doc in docs]

        if request.search:
            transactions = [t for t in transactions if matches_search(t, request.search)]
            if request.limit is not None:
                transactions = transactions[: request.limit]

        logger.debug(
            "transactions_listed",
            window=request.window.value,
            count=len(transactions),
        )
        return transactions


class GetTransactionUseCase:
    """Look up a transaction by id, e.g. after an unknown-outcome commit."""

    def __init__(self, store: IDocumentStore | None = None):
        self._store = store

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(self, transaction_id: str) -> Transaction | None:
        store = await self._get_store()
        doc = await store.get(Collection.TRANSACTIONS, transaction_id)
        return Transaction.from_document(doc) if doc is not None else None
