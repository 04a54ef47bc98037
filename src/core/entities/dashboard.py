"""Read-only dashboard views."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from src.core.entities.product import Product
from src.core.entities.timestamps import Timestamp
from src.core.entities.transaction import Transaction


class TimeWindow(str, Enum):
    """Reporting window relative to the current time."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


class TopSellingProduct(BaseModel):
    """Net units and revenue for one product."""

    product_id: str
    product_name: str
    quantity: int = 0
    revenue: Decimal = Decimal("0")


class DashboardSummary(BaseModel):
    """Aggregated statistics over transactions and stock records."""

    window: TimeWindow = TimeWindow.ALL
    generated_at: Timestamp

    # Sales
    total_sales: Decimal = Decimal("0")  # net of discounts and returns
    gross_sales: Decimal = Decimal("0")  # line totals before discounts/returns
    today_sales: Decimal = Decimal("0")
    returned_amount: Decimal = Decimal("0")
    transaction_count: int = 0
    items_sold: int = 0

    # Stock
    low_stock: list[Product] = Field(default_factory=list)
    out_of_stock: list[Product] = Field(default_factory=list)

    top_selling: list[TopSellingProduct] = Field(default_factory=list)
    recent_transactions: list[Transaction] = Field(default_factory=list)
