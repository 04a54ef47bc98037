"""Record Initial Stock Use Case - create a product with opening stock."""

from dataclasses import dataclass
from uuid import uuid4

from src.application.atomic import execute_atomic
from src.application.dto.requests import RecordInitialStockRequest
from src.config import get_logger, get_settings
from src.core.entities.product import Product
from src.core.entities.purchase import PurchaseEntry, PurchaseKind
from src.core.entities.timestamps import utc_now
from src.core.exceptions import (
    DuplicateProductError,
    InvalidProductError,
    InvalidQuantityError,
)
from src.core.interfaces.document_store import Collection, IAtomicHandle, IDocumentStore

logger = get_logger(__name__)


@dataclass
class RecordInitialStockResult:
    """Result of creating a product."""

    product: Product
    entry: PurchaseEntry | None  # None when opening stock is zero


class RecordInitialStockUseCase:
    """Create a product and its initial_stock ledger entry in one atomic block."""

    def __init__(self, store: IDocumentStore | None = None):
        self._store = store

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(
        self,
        request: RecordInitialStockRequest,
        actor: str | None = None,
    ) -> RecordInitialStockResult:
        """Execute record initial stock use case."""
        logger.info(
            "initial_stock_started",
            name=request.name,
            quantity=request.initial_quantity,
        )
        self._validate(request)

        settings = get_settings()
        now = utc_now()
        threshold = request.low_stock_threshold
        if threshold is None:
            threshold = settings.engine.default_low_stock_threshold

        product = Product(
            id=request.product_id or str(uuid4()),
            name=request.name.strip(),
            category=request.category.strip(),
            sub_category=request.sub_category.strip(),
            unit_type=request.unit_type,
            price_per_unit=request.price_per_unit,
            purchase_price_per_unit=request.purchase_price_per_unit,
            purchased_quantity=request.initial_quantity,
            sold_quantity=0,
            low_stock_threshold=threshold,
            vendor=request.vendor,
            created_at=now,
            updated_at=now,
            last_restock_at=now if request.initial_quantity > 0 else None,
        )

        entry = None
        if request.initial_quantity > 0:
            entry = PurchaseEntry(
                product_id=product.id,
                product_name=product.name,
                kind=PurchaseKind.INITIAL_STOCK,
                quantity=request.initial_quantity,
                unit_price=request.purchase_price_per_unit
                if request.purchase_price_per_unit is not None
                else request.price_per_unit,
                vendor=request.vendor,
                note=request.note,
                actor=actor,
                created_at=now,
            )

        async def create(handle: IAtomicHandle) -> None:
            if await handle.read(Collection.PRODUCTS, product.id) is not None:
                raise DuplicateProductError(product.id)
            handle.write(Collection.PRODUCTS, product.id, product.to_document())
            if entry is not None:
                handle.write(Collection.PURCHASE_HISTORY, entry.id, entry.to_document())

        store = await self._get_store()
        await execute_atomic(store, create, "record_initial_stock")

        logger.info(
            "initial_stock_complete",
            product_id=product.id,
            purchased_quantity=product.purchased_quantity,
            ledger_entry=entry.id if entry else None,
        )
        return RecordInitialStockResult(product=product, entry=entry)

    @staticmethod
    def _validate(request: RecordInitialStockRequest) -> None:
        if not request.name or not request.name.strip():
            raise InvalidProductError("name", "is required")
        if request.price_per_unit < 0:
            raise InvalidQuantityError(
                "price_per_unit", request.price_per_unit, "must not be negative"
            )
        if request.purchase_price_per_unit is not None and request.purchase_price_per_unit < 0:
            raise InvalidQuantityError(
                "purchase_price_per_unit",
                request.purchase_price_per_unit,
                "must not be negative",
            )
        if request.initial_quantity < 0:
            raise InvalidQuantityError(
                "initial_quantity", request.initial_quantity, "must not be negative"
            )
        if request.low_stock_threshold is not None and request.low_stock_threshold < 0:
            raise InvalidQuantityError(
                "low_stock_threshold",
                request.low_stock_threshold,
                "must not be negative",
            )
