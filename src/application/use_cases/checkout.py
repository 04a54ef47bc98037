"""Checkout Use Case - atomic multi-line sale commit."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from src.application.atomic import execute_atomic
from src.application.dto.requests import CheckoutRequest
from src.config import get_logger
from src.core.entities.cart import Cart, CartLine
from src.core.entities.product import Product
from src.core.entities.timestamps import utc_now
from src.core.entities.transaction import (
    Discount,
    DiscountType,
    Transaction,
    TransactionLine,
)
from src.core.exceptions import (
    EmptyCartError,
    InvalidDiscountError,
    InvalidQuantityError,
    NotAuthenticatedError,
    ProductRemovedError,
)
from src.core.interfaces.document_store import Collection, IAtomicHandle, IDocumentStore

logger = get_logger(__name__)


class CheckoutState(str, Enum):
    """Lifecycle of a single checkout attempt."""

    IDLE = "idle"
    VALIDATING = "validating"
    COMMITTING = "committing"
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass
class CheckoutResult:
    """Result of a checkout."""

    transaction: Transaction
    state: CheckoutState
    replayed: bool = False  # transaction_id was already committed


class CheckoutUseCase:
    """
    Commit a cart as one transaction.

    Every line is re-validated against the live product inside a single
    atomic block: either all stock decrements and the transaction record are
    written, or nothing is.
    """

    def __init__(self, store: IDocumentStore | None = None):
        self._store = store
        self.state = CheckoutState.IDLE

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(
        self,
        cart: Cart,
        actor: str | None,
        request: CheckoutRequest | None = None,
    ) -> CheckoutResult:
        """Execute checkout use case."""
        request = request or CheckoutRequest()
        self.state = CheckoutState.VALIDATING
        logger.info(
            "checkout_started",
            lines=len(cart),
            actor=actor,
            transaction_id=request.transaction_id,
        )

        try:
            self._validate(cart, actor, request)
            store = await self._get_store()

            lines = [line.model_copy() for line in cart.iter_lines()]
            transaction_id = request.transaction_id or str(uuid4())

            async def commit(handle: IAtomicHandle) -> tuple[Transaction, bool]:
                return await self._commit(
                    handle, transaction_id, lines, actor, request  # type: ignore[arg-type]
                )

            self.state = CheckoutState.COMMITTING
            transaction, replayed = await execute_atomic(store, commit, "checkout")
        except Exception as e:
            self.state = CheckoutState.ABORTED
            logger.warning(
                "checkout_aborted",
                actor=actor,
                error=type(e).__name__,
                message=str(e),
            )
            raise

        self.state = CheckoutState.COMMITTED
        if request.clear_cart:
            cart.clear()

        logger.info(
            "checkout_committed",
            transaction_id=transaction.id,
            total=str(transaction.total),
            grand_total=str(transaction.grand_total),
            items=transaction.item_count,
            replayed=replayed,
        )
        return CheckoutResult(
            transaction=transaction,
            state=self.state,
            replayed=replayed,
        )

    @staticmethod
    def _validate(cart: Cart, actor: str | None, request: CheckoutRequest) -> None:
        """Reject bad input before any store access."""
        if cart.is_empty:
            raise EmptyCartError()
        if not actor or not actor.strip():
            raise NotAuthenticatedError("check out")

        for line in cart.iter_lines():
            if line.quantity <= 0:
                raise InvalidQuantityError("quantity", line.quantity)
            if line.unit_price < 0:
                raise InvalidQuantityError(
                    "unit_price", line.unit_price, "must not be negative"
                )

        if request.discount is not None:
            validate_discount(request.discount, cart.total())

    @staticmethod
    async def _commit(
        handle: IAtomicHandle,
        transaction_id: str,
        lines: list[CartLine],
        actor: str,
        request: CheckoutRequest,
    ) -> tuple[Transaction, bool]:
        if request.transaction_id:
            existing = await handle.read(Collection.TRANSACTIONS, transaction_id)
            if existing is not None:
                return Transaction.from_document(existing), True

        now = utc_now()
        sold: list[tuple[Product, CartLine]] = []

        # Re-read and verify every line before staging any write
        for line in lines:
            doc = await handle.read(Collection.PRODUCTS, line.product_id)
            if doc is None:
                raise ProductRemovedError(line.product_id, line.product_name)
            product = Product.from_document(doc)
            if not product.is_active:
                raise ProductRemovedError(product.id, product.name)
            product.sell(line.quantity, now)
            sold.append((product, line))

        transaction = Transaction(
            id=transaction_id,
            lines=[
                TransactionLine(
                    product_id=product.id,
                    product_name=product.name,
                    unit_type=product.unit_type,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                )
                for product, line in sold
            ],
            discount=request.discount,
            payment_type=request.payment_type,
            customer=request.customer,
            actor=actor,
            created_at=now,
            updated_at=now,
        )

        for product, _ in sold:
            handle.update(Collection.PRODUCTS, product.id, product.stock_fields())
        handle.write(Collection.TRANSACTIONS, transaction.id, transaction.to_document())
        return transaction, False


def validate_discount(discount: Discount, subtotal: Decimal) -> None:
    """Raise InvalidDiscountError if the discount cannot apply to subtotal."""
    if discount.value < 0:
        raise InvalidDiscountError("must not be negative", discount.value)
    if discount.type == DiscountType.PERCENT and discount.value > 100:
        raise InvalidDiscountError("percentage cannot exceed 100", discount.value)
    if discount.amount_for(subtotal) > subtotal:
        raise InvalidDiscountError(
            f"discount exceeds subtotal of {subtotal}", discount.value
        )
