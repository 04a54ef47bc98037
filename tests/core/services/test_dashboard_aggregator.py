"""Tests for DashboardAggregator."""

from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from src.core.entities import TimeWindow, Transaction, TransactionLine
from src.core.entities.transaction import Discount, DiscountType
from src.core.services.dashboard_aggregator import (
    DashboardAggregator,
    in_window,
    window_start,
)

NOW = datetime(2026, 3, 15, 14, 30, tzinfo=UTC)
IST = timezone(timedelta(hours=5, minutes=30))


def _transaction(created_at: datetime, *lines: TransactionLine, **kwargs) -> Transaction:
    return Transaction(lines=list(lines), actor="staff", created_at=created_at, **kwargs)


def _line(product_id: str, quantity: int, price: str, **kwargs) -> TransactionLine:
    return TransactionLine(
        product_id=product_id,
        product_name=f"Product {product_id}",
        quantity=quantity,
        unit_price=Decimal(price),
        **kwargs,
    )


class TestWindowStart:
    def test_all_has_no_bound(self):
        assert window_start(TimeWindow.ALL, NOW, UTC) is None

    def test_today_is_start_of_day(self):
        assert window_start(TimeWindow.TODAY, NOW, UTC) == datetime(2026, 3, 15, tzinfo=UTC)

    def test_week_is_seven_days_before_start_of_day(self):
        assert window_start(TimeWindow.WEEK, NOW, UTC) == datetime(2026, 3, 8, tzinfo=UTC)

    def test_month_is_thirty_days_before_start_of_day(self):
        assert window_start(TimeWindow.MONTH, NOW, UTC) == datetime(2026, 2, 13, tzinfo=UTC)

    @pytest.mark.parametrize(
        ("created_at", "window", "expected"),
        [
            (datetime(2026, 3, 15, 0, 0), TimeWindow.TODAY, True),
            (datetime(2026, 3, 14, 23, 59), TimeWindow.TODAY, False),
            (datetime(2026, 3, 8), TimeWindow.WEEK, True),
            (datetime(2026, 3, 7, 23), TimeWindow.WEEK, False),
            (datetime(2020, 1, 1), TimeWindow.ALL, True),
        ],
    )
    def test_in_window(self, created_at, window, expected):
        assert in_window(_transaction(created_at, _line("A", 1, "1")), window, NOW, UTC) is expected

    def test_today_starts_at_local_midnight(self):
        # 09:00 IST on the 18th; the local day began at 18:30 UTC on the 17th
        now = datetime(2026, 10, 18, 3, 30, tzinfo=UTC)
        assert window_start(TimeWindow.TODAY, now, IST) == datetime(
            2026, 10, 17, 18, 30, tzinfo=UTC
        )
        assert window_start(TimeWindow.WEEK, now, IST) == datetime(
            2026, 10, 10, 18, 30, tzinfo=UTC
        )

    def test_naive_now_read_as_utc(self):
        assert window_start(TimeWindow.TODAY, datetime(2026, 3, 15, 23, 0), UTC) == datetime(
            2026, 3, 15, tzinfo=UTC
        )


class TestSummarize:
    @pytest.fixture
    def aggregator(self):
        return DashboardAggregator(recent_limit=2, top_limit=2, tz=UTC)

    def test_sales_totals_by_window(self, aggregator):
        transactions = [
            _transaction(NOW - timedelta(hours=1), _line("A", 2, "10")),
            _transaction(NOW - timedelta(days=3), _line("B", 1, "5")),
            _transaction(NOW - timedelta(days=40), _line("A", 1, "10")),
        ]

        all_time = aggregator.summarize(transactions, [], TimeWindow.ALL, NOW)
        assert all_time.total_sales == Decimal("35")
        assert all_time.today_sales == Decimal("20")
        assert all_time.transaction_count == 3

        week = aggregator.summarize(transactions, [], TimeWindow.WEEK, NOW)
        assert week.total_sales == Decimal("25")
        assert week.transaction_count == 2
        # today_sales ignores the selected window
        assert week.today_sales == Decimal("20")

    def test_returns_and_discounts_reduce_net_sales(self, aggregator):
        transactions = [
            _transaction(
                NOW,
                _line("A", 2, "10"),
                _line("B", 1, "5", is_returned=True),
                discount=Discount(type=DiscountType.FLAT, value=Decimal("3")),
            ),
        ]
        summary = aggregator.summarize(transactions, [], TimeWindow.ALL, NOW)
        assert summary.gross_sales == Decimal("25")
        assert summary.returned_amount == Decimal("5")
        assert summary.total_sales == Decimal("17")
        assert summary.items_sold == 2

    def test_top_selling_net_of_returns(self, aggregator):
        transactions = [
            _transaction(NOW, _line("A", 2, "10"), _line("B", 5, "1")),
            _transaction(NOW, _line("C", 9, "1", is_returned=True), _line("A", 1, "10")),
        ]
        top = aggregator.summarize(transactions, [], TimeWindow.ALL, NOW).top_selling
        assert [(t.product_id, t.quantity) for t in top] == [("B", 5), ("A", 3)]
        assert top[1].revenue == Decimal("30")

    def test_recent_newest_first(self, aggregator):
        transactions = [
            _transaction(NOW - timedelta(minutes=m), _line("A", 1, "1"))
            for m in (30, 5, 60)
        ]
        recent = aggregator.summarize(transactions, [], TimeWindow.ALL, NOW).recent_transactions
        assert [t.created_at for t in recent] == [
            NOW - timedelta(minutes=5),
            NOW - timedelta(minutes=30),
        ]

    def test_low_and_out_of_stock(self, aggregator, make_product):
        products = [
            make_product(id="A", name="A", purchased_quantity=10, low_stock_threshold=2),
            make_product(id="B", name="B", purchased_quantity=2, low_stock_threshold=2),
            make_product(id="C", name="C", purchased_quantity=3, sold_quantity=3),
            make_product(id="D", name="D", purchased_quantity=1, is_active=False),
        ]
        summary = aggregator.summarize([], products, TimeWindow.ALL, NOW)
        assert [p.id for p in summary.low_stock] == ["C", "B"]
        assert [p.id for p in summary.out_of_stock] == ["C"]

    def test_empty_inputs(self, aggregator):
        summary = aggregator.summarize([], [], TimeWindow.TODAY, NOW)
        assert summary.total_sales == Decimal("0")
        assert summary.top_selling == []
        assert summary.window == TimeWindow.TODAY
        assert summary.generated_at == NOW

    def test_today_sales_cross_utc_day_boundary(self):
        """Early-morning local sales fall on the previous UTC day but still count."""
        aggregator = DashboardAggregator(tz=IST)
        now = datetime(2026, 10, 18, 3, 30, tzinfo=UTC)
        transactions = [
            # 02:00 IST on the 18th
            _transaction(datetime(2026, 10, 17, 20, 30, tzinfo=UTC), _line("A", 1, "10")),
            # 23:00 IST on the 17th
            _transaction(datetime(2026, 10, 17, 17, 30, tzinfo=UTC), _line("B", 1, "4")),
        ]

        summary = aggregator.summarize(transactions, [], TimeWindow.TODAY, now)

        assert summary.today_sales == Decimal("10")
        assert summary.total_sales == Decimal("10")
        assert summary.transaction_count == 1
