"""
Dashboard aggregation over committed transactions and stock records.

Pure folds with no store access: the caller loads the collections and
passes them in.
"""

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta, tzinfo
from decimal import Decimal

from src.core.entities.dashboard import DashboardSummary, TimeWindow, TopSellingProduct
from src.core.entities.product import Product
from src.core.entities.timestamps import as_utc, utc_now
from src.core.entities.transaction import Transaction

WINDOW_DAYS = {
    TimeWindow.WEEK: 7,
    TimeWindow.MONTH: 30,
}


def local_midnight(now: datetime, tz: tzinfo | None = None) -> datetime:
    """Naive wall-clock midnight of the local day containing ``now``.

    ``tz`` is the shop's zone; None means the system zone. Naive ``now``
    values are read as UTC.
    """
    local = as_utc(now).astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0, tzinfo=None)


def local_to_utc(wall: datetime, tz: tzinfo | None = None) -> datetime:
    # astimezone resolves a naive wall time against the system zone
    if tz is not None:
        wall = wall.replace(tzinfo=tz)
    return wall.astimezone(UTC)


def window_start(
    window: TimeWindow, now: datetime, tz: tzinfo | None = None
) -> datetime | None:
    """
    Lower time bound (UTC) for a reporting window.

    Windows are anchored at local midnight, so ``week`` covers today plus the
    seven local days before it. Returns None for ``all``.
    """
    if window == TimeWindow.ALL:
        return None
    midnight = local_midnight(now, tz)
    if window != TimeWindow.TODAY:
        midnight -= timedelta(days=WINDOW_DAYS[window])
    return local_to_utc(midnight, tz)


def in_window(
    transaction: Transaction,
    window: TimeWindow,
    now: datetime,
    tz: tzinfo | None = None,
) -> bool:
    start = window_start(window, now, tz)
    return start is None or transaction.created_at >= start


class DashboardAggregator:
    """Computes dashboard views from transactions and products."""

    def __init__(
        self,
        recent_limit: int = 5,
        top_limit: int = 5,
        tz: tzinfo | None = None,
    ):
        self.recent_limit = recent_limit
        self.top_limit = top_limit
        self.tz = tz

    def summarize(
        self,
        transactions: Iterable[Transaction],
        products: Iterable[Product],
        window: TimeWindow = TimeWindow.ALL,
        now: datetime | None = None,
    ) -> DashboardSummary:
        """Build the full dashboard for a window."""
        now = as_utc(now) if now is not None else utc_now()
        all_transactions = list(transactions)
        products = list(products)
        windowed = [t for t in all_transactions if in_window(t, window, now, self.tz)]
        today = [t for t in all_transactions if in_window(t, TimeWindow.TODAY, now, self.tz)]

        return DashboardSummary(
            window=window,
            generated_at=now,
            total_sales=self.total_sales(windowed),
            gross_sales=sum((t.total for t in windowed), Decimal("0")),
            today_sales=self.total_sales(today),
            returned_amount=sum((t.returned_amount for t in windowed), Decimal("0")),
            transaction_count=len(windowed),
            items_sold=sum(
                line.quantity
                for t in windowed
                for line in t.lines
                if not line.is_returned
            ),
            low_stock=self.low_stock(products),
            out_of_stock=self.out_of_stock(products),
            top_selling=self.top_selling(windowed),
            recent_transactions=self.recent(windowed),
        )

    @staticmethod
    def total_sales(transactions: Iterable[Transaction]) -> Decimal:
        """Sum of net totals (after discount, less returned lines)."""
        return sum((t.net_total for t in transactions), Decimal("0"))

    @staticmethod
    def low_stock(products: Iterable[Product]) -> list[Product]:
        """Active products at or below their threshold, lowest first."""
        low = [p for p in products if p.is_active and p.is_low_stock]
        return sorted(low, key=lambda p: (p.remaining_quantity, p.name))

    @staticmethod
    def out_of_stock(products: Iterable[Product]) -> list[Product]:
        return sorted(
            (p for p in products if p.is_active and p.is_out_of_stock),
            key=lambda p: p.name,
        )

    def top_selling(self, transactions: Iterable[Transaction]) -> list[TopSellingProduct]:
        """Products ranked by net units sold; returned lines do not count."""
        totals: dict[str, TopSellingProduct] = {}
        for transaction in transactions:
            for line in transaction.lines:
                if line.is_returned:
                    continue
                entry = totals.setdefault(
                    line.product_id,
                    TopSellingProduct(
                        product_id=line.product_id,
                        product_name=line.product_name,
                    ),
                )
                entry.quantity += line.quantity
                entry.revenue += line.line_total

        ranked = sorted(
            totals.values(),
            key=lambda e: (-e.quantity, -e.revenue, e.product_name),
        )
        return ranked[: self.top_limit]

    def recent(self, transactions: Iterable[Transaction]) -> list[Transaction]:
        ordered = sorted(transactions, key=lambda t: t.created_at, reverse=True)
        return ordered[: self.recent_limit]
