"""Restock Product Use Case - purchase ledger entry feeding current stock."""

from dataclasses import dataclass

from src.application.atomic import execute_atomic
from src.application.dto.requests import RestockRequest
from src.config import get_logger
from src.core.entities.product import Product
from src.core.entities.purchase import PurchaseEntry, PurchaseKind
from src.core.entities.timestamps import utc_now
from src.core.exceptions import InvalidQuantityError, ProductNotFoundError
from src.core.interfaces.document_store import Collection, IAtomicHandle, IDocumentStore

logger = get_logger(__name__)


@dataclass
class RestockResult:
    """Result of restocking a product."""

    product: Product
    entry: PurchaseEntry


class RestockProductUseCase:
    """Increment purchased quantity and append a restock ledger entry."""

    def __init__(self, store: IDocumentStore | None = None):
        self._store = store

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(
        self,
        request: RestockRequest,
        actor: str | None = None,
    ) -> RestockResult:
        """Execute restock use case."""
        logger.info(
            "restock_started",
            product_id=request.product_id,
            quantity=request.quantity,
            unit_price=str(request.unit_price),
        )

        if request.quantity <= 0:
            raise InvalidQuantityError("quantity", request.quantity)
        if request.unit_price < 0:
            raise InvalidQuantityError(
                "unit_price", request.unit_price, "must not be negative"
            )

        async def restock(handle: IAtomicHandle) -> RestockResult:
            doc = await handle.read(Collection.PRODUCTS, request.product_id)
            if doc is None:
                raise ProductNotFoundError(request.product_id)

            now = utc_now()
            product = Product.from_document(doc)
            product.receive(request.quantity, now)
            if request.update_purchase_price:
                product.purchase_price_per_unit = request.unit_price

            entry = PurchaseEntry(
                product_id=product.id,
                product_name=product.name,
                kind=PurchaseKind.RESTOCK,
                quantity=request.quantity,
                unit_price=request.unit_price,
                vendor=request.vendor or product.vendor,
                note=request.note,
                actor=actor,
                created_at=now,
            )

            handle.update(Collection.PRODUCTS, product.id, product.stock_fields())
            handle.write(Collection.PURCHASE_HISTORY, entry.id, entry.to_document())
            return RestockResult(product=product, entry=entry)

        store = await self._get_store()
        result = await execute_atomic(store, restock, "restock")

        logger.info(
            "restock_complete",
            product_id=result.product.id,
            purchased_quantity=result.product.purchased_quantity,
            remaining_quantity=result.product.remaining_quantity,
            total_cost=str(result.entry.total_cost),
        )
        return result
