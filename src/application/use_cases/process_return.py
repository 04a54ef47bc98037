"""Process Return Use Case - compensating stock increment for a sold line."""

from dataclasses import dataclass

from src.application.atomic import execute_atomic
from src.config import get_logger
from src.core.entities.product import Product
from src.core.entities.returns import ReturnRecord
from src.core.entities.timestamps import utc_now
from src.core.entities.transaction import Transaction
from src.core.exceptions import (
    AlreadyReturnedError,
    EmptyReasonError,
    NotAuthenticatedError,
    TransactionLineNotFoundError,
    TransactionNotFoundError,
)
from src.core.interfaces.document_store import Collection, IAtomicHandle, IDocumentStore

logger = get_logger(__name__)

INVENTORY_ADJUSTMENT_SKIPPED = "InventoryAdjustmentSkipped"


@dataclass
class ReturnResult:
    """Result of a processed return.

    A missing product does not fail the return: the line is still flagged
    and the record written, but ``warning`` is set and stock is untouched.
    """

    return_record: ReturnRecord
    transaction: Transaction
    inventory_adjusted: bool = True
    warning: str | None = None

    @property
    def inventory_adjustment_skipped(self) -> bool:
        return self.warning == INVENTORY_ADJUSTMENT_SKIPPED


class ProcessReturnUseCase:
    """Return one whole transaction line exactly once."""

    def __init__(self, store: IDocumentStore | None = None):
        self._store = store

    async def _get_store(self) -> IDocumentStore:
        if self._store is None:
            from src.infrastructure.storage import get_document_store

            self._store = await get_document_store()
        return self._store

    async def execute(
        self,
        transaction_id: str,
        line_id: str,
        reason: str,
        actor: str | None,
    ) -> ReturnResult:
        """Execute process return use case."""
        logger.info(
            "return_started",
            transaction_id=transaction_id,
            line_id=line_id,
            actor=actor,
        )

        reason = (reason or "").strip()
        if not reason:
            raise EmptyReasonError()
        if not actor or not actor.strip():
            raise NotAuthenticatedError("process a return")

        async def process(handle: IAtomicHandle) -> ReturnResult:
            doc = await handle.read(Collection.TRANSACTIONS, transaction_id)
            if doc is None:
                raise TransactionNotFoundError(transaction_id)
            transaction = Transaction.from_document(doc)

            line = transaction.find_line(line_id)
            if line is None:
                raise TransactionLineNotFoundError(transaction_id, line_id)
            if line.is_returned:
                raise AlreadyReturnedError(transaction_id, line_id, line.product_name)

            now = utc_now()
            product_doc = await handle.read(Collection.PRODUCTS, line.product_id)

            record = ReturnRecord(
                transaction_id=transaction_id,
                line_id=line_id,
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                refunded_amount=line.line_total,
                reason=reason,
                actor=actor,
                customer=transaction.customer,
                inventory_adjusted=product_doc is not None,
                created_at=now,
            )

            line.is_returned = True
            line.return_id = record.id
            line.return_reason = reason
            line.returned_at = now
            line.returned_by = actor
            transaction.updated_at = now

            if product_doc is not None:
                product = Product.from_document(product_doc)
                product.restore(line.quantity, now)
                handle.update(Collection.PRODUCTS, product.id, product.stock_fields())

            # Only the return sub-fields of lines change on the transaction
            updated = transaction.to_document()
            handle.update(
                Collection.TRANSACTIONS,
                transaction_id,
                {"lines": updated["lines"], "updated_at": updated["updated_at"]},
            )
            handle.write(Collection.RETURNS, record.id, record.to_document())

            return ReturnResult(
                return_record=record,
                transaction=transaction,
                inventory_adjusted=record.inventory_adjusted,
                warning=None if record.inventory_adjusted else INVENTORY_ADJUSTMENT_SKIPPED,
            )

        store = await self._get_store()
        result = await execute_atomic(store, process, "process_return")

        if not result.inventory_adjusted:
            logger.warning(
                "inventory_adjustment_skipped",
                transaction_id=transaction_id,
                product_id=result.return_record.product_id,
            )
        logger.info(
            "return_processed",
            return_id=result.return_record.id,
            transaction_id=transaction_id,
            refunded_amount=str(result.return_record.refunded_amount),
        )
        return result
