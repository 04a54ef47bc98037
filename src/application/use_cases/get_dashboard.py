"""Get Dashboard Use Case - read-only statistics."""

from datetime import datetime

from src.config import get_logger, get_settings
from src.core.entities.dashboard import DashboardSummary, TimeWindow
from src.core.entities.product import Product
from src.core.entities.transaction import Transaction
from src.core.interfaces.document_store import Collection, IDocumentStore
from src.core.services.dashboard_aggregator import DashboardAggregator

logger = get_logger(__name__)


class GetDashboardUseCase:
    """Load transactions and products and fold them into a summary."""

    def __init__(
        self,
        store: IDocumentStore | None = None,
        aggregator: DashboardAggregator | None = None,
    ):
        self._store = store
        if aggregator is None:
            settings = get_settings()
            aggregator = DashboardAggregator(
                recent_limit=settings.engine.recent_transactions_limit,
                top_limit=settings.engine.top_selling_limit,
                tz=settings.engine.zone,
            )
        self._aggregator = aggregator

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(
        self,
        window: TimeWindow = TimeWindow.ALL,
        now: datetime | None = None,
    ) -> DashboardSummary:
        """Execute get dashboard use case."""
        store = await self._get_store()
        transaction_docs = await store.query(Collection.TRANSACTIONS)
        product_docs = await store.query(Collection.PRODUCTS)

        summary = self._aggregator.summarize(
            transactions=[Transaction.from_document(d) for d in transaction_docs],
            products=[Product.from_document(d) for d in product_docs],
            window=window,
            now=now,
        )

        logger.info(
            "dashboard_generated",
            window=window.value,
            transactions=summary.transaction_count,
            total_sales=str(summary.total_sales),
            low_stock=len(summary.low_stock),
        )
        return summary
