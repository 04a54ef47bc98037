"""Tests for CheckoutUseCase."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
import structlog

from src.application.dto.requests import CheckoutRequest
from src.application.use_cases.checkout import CheckoutState, CheckoutUseCase
from src.config import reset_settings
from src.core.entities import Cart, Product, Transaction
from src.core.entities.transaction import CustomerInfo, Discount, DiscountType, PaymentType
from src.core.exceptions import (
    CommitConflictError,
    EmptyCartError,
    InsufficientStockError,
    InvalidDiscountError,
    NotAuthenticatedError,
    ProductRemovedError,
    StoreUnavailableError,
    WriteConflictError,
)
from src.core.interfaces import Collection


@pytest.fixture
def mock_store():
    return AsyncMock()


@pytest.fixture
def use_case(store):
    return CheckoutUseCase(store=store)


async def _load_product(store, product_id: str = "P-001") -> Product:
    return Product.from_document(await store.get(Collection.PRODUCTS, product_id))


class TestCheckoutValidation:
    """Input errors are raised before any store access."""

    async def test_empty_cart(self, mock_store):
        use_case = CheckoutUseCase(store=mock_store)
        with pytest.raises(EmptyCartError):
            await use_case.execute(Cart(), "staff")
        mock_store.run_atomic.assert_not_called()
        assert use_case.state == CheckoutState.ABORTED

    @pytest.mark.parametrize("actor", [None, "", "   "])
    async def test_missing_actor(self, mock_store, make_product, actor):
        cart = Cart().add_line(make_product(), 1)
        with pytest.raises(NotAuthenticatedError):
            await CheckoutUseCase(store=mock_store).execute(cart, actor)
        mock_store.run_atomic.assert_not_called()

    @pytest.mark.parametrize(
        "discount",
        [
            Discount(type=DiscountType.FLAT, value=Decimal("-1")),
            Discount(type=DiscountType.PERCENT, value=Decimal("150")),
            Discount(type=DiscountType.FLAT, value=Decimal("11")),
        ],
    )
    async def test_invalid_discount(self, mock_store, make_product, discount):
        cart = Cart().add_line(make_product(), 1)
        with pytest.raises(InvalidDiscountError):
            await CheckoutUseCase(store=mock_store).execute(
                cart, "staff", CheckoutRequest(discount=discount)
            )
        mock_store.run_atomic.assert_not_called()


class TestCheckoutCommit:
    async def test_scenario_a_commit_decrements_stock(self, use_case, store, seed_product):
        """remaining 5, cart 3 -> remaining 2, total 3 x unit price."""
        product = await seed_product(purchased_quantity=5)
        cart = Cart().add_line(product, 3)

        result = await use_case.execute(cart, "staff@example.com")

        assert result.state == CheckoutState.COMMITTED
        assert result.transaction.total == Decimal("30.00")
        assert result.transaction.lines[0].product_name == "Cotton Fabric"
        live = await _load_product(store)
        assert live.remaining_quantity == 2
        assert live.sold_quantity == 3

        stored = await store.get(Collection.TRANSACTIONS, result.transaction.id)
        assert Transaction.from_document(stored).total == Decimal("30.00")

    async def test_cart_cleared_after_commit(self, use_case, seed_product):
        product = await seed_product()
        cart = Cart().add_line(product, 1)
        await use_case.execute(cart, "staff")
        assert cart.is_empty

    async def test_cart_kept_when_requested(self, use_case, seed_product):
        product = await seed_product()
        cart = Cart().add_line(product, 1)
        await use_case.execute(cart, "staff", CheckoutRequest(clear_cart=False))
        assert len(cart) == 1

    async def test_scenario_b_insufficient_stock(self, use_case, store, seed_product, make_product):
        """remaining 2, cart 5 -> InsufficientStock, stock unchanged."""
        await seed_product(purchased_quantity=2)
        cart = Cart()
        # Snapshot taken before someone else sold units
        cart.add_line(make_product(purchased_quantity=10), 5)

        with pytest.raises(InsufficientStockError) as exc_info:
            await use_case.execute(cart, "staff")

        assert exc_info.value.requested == 5
        assert exc_info.value.available == 2
        assert use_case.state == CheckoutState.ABORTED
        assert (await _load_product(store)).remaining_quantity == 2
        assert await store.query(Collection.TRANSACTIONS) == []
        assert len(cart) == 1

    async def test_all_or_nothing_across_lines(self, use_case, store, seed_product, make_product):
        """One short line aborts the whole cart."""
        await seed_product(id="A", name="A", purchased_quantity=5)
        await seed_product(id="B", name="B", purchased_quantity=1)
        cart = Cart()
        cart.add_line(make_product(id="A", name="A", purchased_quantity=5), 2)
        cart.add_line(make_product(id="B", name="B", purchased_quantity=5), 3)

        with pytest.raises(InsufficientStockError):
            await use_case.execute(cart, "staff")

        assert (await _load_product(store, "A")).sold_quantity == 0
        assert (await _load_product(store, "B")).sold_quantity == 0

    async def test_missing_product(self, use_case, make_product):
        cart = Cart().add_line(make_product(id="GONE"), 1)
        with pytest.raises(ProductRemovedError):
            await use_case.execute(cart, "staff")

    async def test_disabled_product(self, use_case, seed_product, make_product):
        await seed_product(is_active=False)
        cart = Cart().add_line(make_product(), 1)
        with pytest.raises(ProductRemovedError):
            await use_case.execute(cart, "staff")

    async def test_price_snapshot_from_cart(self, use_case, store, seed_product, make_product):
        """Line price is the add-time price even if the product was repriced."""
        await seed_product(price_per_unit=Decimal("12.00"))
        cart = Cart().add_line(make_product(price_per_unit=Decimal("10.00")), 2)

        result = await use_case.execute(cart, "staff")
        assert result.transaction.lines[0].unit_price == Decimal("10.00")
        assert result.transaction.total == Decimal("20.00")

    async def test_order_details_recorded(self, use_case, seed_product):
        product = await seed_product()
        cart = Cart().add_line(product, 2)
        request = CheckoutRequest(
            payment_type=PaymentType.UPI,
            customer=CustomerInfo(name="Asha", mobile="98765"),
            discount=Discount(type=DiscountType.PERCENT, value=Decimal("10")),
        )

        transaction = (await use_case.execute(cart, "staff", request)).transaction
        assert transaction.payment_type == PaymentType.UPI
        assert transaction.customer.name == "Asha"
        assert transaction.grand_total == Decimal("18.00")

    async def test_idempotent_transaction_id(self, use_case, store, seed_product):
        product = await seed_product(purchased_quantity=5)
        request = CheckoutRequest(transaction_id="ORDER-1")

        first = await use_case.execute(Cart().add_line(product, 2), "staff", request)
        second = await CheckoutUseCase(store=store).execute(
            Cart().add_line(product, 2), "staff", request
        )

        assert first.replayed is False
        assert second.replayed is True
        assert second.transaction.id == "ORDER-1"
        assert (await _load_product(store)).sold_quantity == 2
        assert len(await store.query(Collection.TRANSACTIONS)) == 1


class TestCheckoutStoreFailures:
    async def test_conflicts_exhausted(self, mock_store, make_product, monkeypatch):
        monkeypatch.setenv("ENGINE_MAX_COMMIT_ATTEMPTS", "3")
        reset_settings()
        mock_store.run_atomic.side_effect = WriteConflictError("products", "P-001")
        cart = Cart().add_line(make_product(), 1)

        with pytest.raises(CommitConflictError) as exc_info:
            await CheckoutUseCase(store=mock_store).execute(cart, "staff")

        assert exc_info.value.unknown_outcome is False
        assert mock_store.run_atomic.await_count == 3
        assert len(cart) == 1

    async def test_store_unavailable_not_retried(self, mock_store, make_product):
        mock_store.run_atomic.side_effect = StoreUnavailableError("run_atomic", "offline")
        cart = Cart().add_line(make_product(), 1)

        with pytest.raises(StoreUnavailableError):
            await CheckoutUseCase(store=mock_store).execute(cart, "staff")
        assert mock_store.run_atomic.await_count == 1

    async def test_atomic_block_carries_operation_log_context(self, mock_store, make_product):
        seen: dict = {}

        async def capture(fn):
            seen.update(structlog.contextvars.get_contextvars())
            raise StoreUnavailableError("run_atomic", "offline")

        mock_store.run_atomic.side_effect = capture
        cart = Cart().add_line(make_product(), 1)

        with pytest.raises(StoreUnavailableError):
            await CheckoutUseCase(store=mock_store).execute(cart, "staff")

        assert seen["operation"] == "checkout"
        assert len(seen["operation_id"]) == 12
        assert "operation_id" not in structlog.contextvars.get_contextvars()
