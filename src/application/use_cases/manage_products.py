"""Product maintenance use cases: soft-disable and purchase history."""

from src.application.atomic import execute_atomic
from src.config import get_logger, get_settings
from src.core.entities.product import Product
from src.core.entities.purchase import PurchaseEntry
from src.core.entities.timestamps import format_timestamp, utc_now
from src.core.exceptions import ProductNotFoundError
from src.core.interfaces.document_store import (
    Collection,
    IAtomicHandle,
    IDocumentStore,
    QueryFilter,
)

logger = get_logger(__name__)


class DeactivateProductUseCase:
    """
    Soft-disable a product.

    Products referenced by ledger or transaction history are never deleted;
    a disabled product can no longer be added to carts or checked out.
    """

    def __init__(self, store: IDocumentStore | None = None):
        self._store = store

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(self, product_id: str) -> Product:
        async def deactivate(handle: IAtomicHandle) -> Product:
            doc = await handle.read(Collection.PRODUCTS, product_id)
            if doc is None:
                raise ProductNotFoundError(product_id)
            product = Product.from_document(doc)
            if product.is_active:
                product.is_active = False
                product.updated_at = utc_now()
                handle.update(
                    Collection.PRODUCTS,
                    product_id,
                    {"is_active": False, "updated_at": format_timestamp(product.updated_at)},
                )
            return product

        store = await self._get_store()
        product = await execute_atomic(store, deactivate, "deactivate_product")
        logger.info("product_deactivated", product_id=product_id)
        return product


class ListPurchaseHistoryUseCase:
    """List purchase ledger entries, newest first."""

    def __init__(self, store: IDocumentStore | None = None):
        self._store = store

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(
        self,
        product_id: str | None = None,
        limit: int | None = None,
    ) -> list[PurchaseEntry]:
        store = await self._get_store()
        filters = []
        if product_id is not None:
            filters.append(QueryFilter("product_id", "==", product_id))

        docs = await store.query(
            Collection.PURCHASE_HISTORY,
            filters=filters,
            order_by="created_at",
            descending=True,
            limit=limit or get_settings().engine.history_page_size,
        )
        return [PurchaseEntry.from_document(doc) for doc in docs]
