"""Tests for ProcessReturnUseCase."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import CheckoutRequest
from src.application.use_cases.checkout import CheckoutUseCase
from src.application.use_cases.process_return import (
    INVENTORY_ADJUSTMENT_SKIPPED,
    ProcessReturnUseCase,
)
from src.core.entities import Cart, Product, Transaction
from src.core.entities.transaction import CustomerInfo
from src.core.exceptions import (
    AlreadyReturnedError,
    EmptyReasonError,
    NotAuthenticatedError,
    TransactionLineNotFoundError,
    TransactionNotFoundError,
)
from src.core.interfaces import Collection


@pytest.fixture
async def sale(store, seed_product) -> Transaction:
    """Committed sale of 2 units at 10.00 (line total 20.00)."""
    product = await seed_product(purchased_quantity=5)
    result = await CheckoutUseCase(store=store).execute(
        Cart().add_line(product, 2),
        "cashier",
        CheckoutRequest(customer=CustomerInfo(name="Ravi")),
    )
    return result.transaction


async def _product(store) -> Product:
    return Product.from_document(await store.get(Collection.PRODUCTS, "P-001"))


class TestProcessReturnUseCase:
    async def test_scenario_d_return_restores_stock(self, store, sale):
        line = sale.lines[0]
        assert (await _product(store)).sold_quantity == 2

        result = await ProcessReturnUseCase(store=store).execute(
            sale.id, line.line_id, "  damaged ", "manager"
        )

        assert result.inventory_adjusted is True
        assert result.warning is None
        assert result.return_record.refunded_amount == Decimal("20.00")
        assert result.return_record.reason == "damaged"
        assert result.return_record.customer.name == "Ravi"

        returned_line = result.transaction.find_line(line.line_id)
        assert returned_line.is_returned is True
        assert returned_line.returned_by == "manager"
        assert returned_line.return_id == result.return_record.id

        stored = Transaction.from_document(await store.get(Collection.TRANSACTIONS, sale.id))
        assert stored.lines[0].is_returned is True
        assert stored.lines[0].unit_price == line.unit_price
        assert (await _product(store)).sold_quantity == 0
        assert len(await store.query(Collection.RETURNS)) == 1

    async def test_scenario_e_second_return_rejected(self, store, sale):
        use_case = ProcessReturnUseCase(store=store)
        line_id = sale.lines[0].line_id
        await use_case.execute(sale.id, line_id, "damaged", "manager")
        product_before = await _product(store)

        with pytest.raises(AlreadyReturnedError):
            await use_case.execute(sale.id, line_id, "again", "manager")

        assert (await _product(store)).sold_quantity == product_before.sold_quantity
        assert len(await store.query(Collection.RETURNS)) == 1

    async def test_missing_product_skips_adjustment(self, store, sale):
        await store.close()  # drops every collection
        await store.put(Collection.TRANSACTIONS, sale.id, sale.to_document())

        result = await ProcessReturnUseCase(store=store).execute(
            sale.id, sale.lines[0].line_id, "wrong size", "manager"
        )

        assert result.inventory_adjusted is False
        assert result.warning == INVENTORY_ADJUSTMENT_SKIPPED
        assert result.inventory_adjustment_skipped is True
        assert result.return_record.inventory_adjusted is False
        assert await store.get(Collection.PRODUCTS, "P-001") is None
        assert len(await store.query(Collection.RETURNS)) == 1

    async def test_unknown_transaction(self, store):
        with pytest.raises(TransactionNotFoundError):
            await ProcessReturnUseCase(store=store).execute("T-X", "L-X", "damaged", "manager")

    async def test_unknown_line(self, store, sale):
        with pytest.raises(TransactionLineNotFoundError):
            await ProcessReturnUseCase(store=store).execute(sale.id, "L-X", "damaged", "manager")

    @pytest.mark.parametrize("reason", ["", "   ", None])
    async def test_empty_reason(self, reason):
        mock_store = AsyncMock()
        with pytest.raises(EmptyReasonError):
            await ProcessReturnUseCase(store=mock_store).execute("T-1", "L-1", reason, "manager")
        mock_store.run_atomic.assert_not_called()

    async def test_missing_actor(self):
        mock_store = AsyncMock()
        with pytest.raises(NotAuthenticatedError):
            await ProcessReturnUseCase(store=mock_store).execute("T-1", "L-1", "damaged", None)
        mock_store.run_atomic.assert_not_called()
