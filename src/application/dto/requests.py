"""Request DTOs for engine operations.

Pydantic v2 models describing caller input. Range checks that map to
engine errors (quantities, prices, discounts) are done by the use cases,
so these models stay permissive about values.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.core.entities.dashboard import TimeWindow
from src.core.entities.product import VendorInfo
from src.core.entities.transaction import CustomerInfo, Discount, PaymentType


# --- Stock ---


class RecordInitialStockRequest(BaseModel):
    """Request to create a product with its opening stock."""

    product_id: str | None = Field(
        default=None,
        description="Product ID (generated when omitted)",
    )
    name: str = Field(default="", description="Product name")
    category: str = Field(default="", description="Category")
    sub_category: str = Field(default="", description="Sub-category")
    unit_type: str = Field(
        default="piece",
        description="Unit label",
        examples=["meter", "kilogram", "piece", "box"],
    )
    price_per_unit: Decimal = Field(..., description="Selling price per unit")
    purchase_price_per_unit: Decimal | None = Field(
        default=None,
        description="Purchase price per unit",
    )
    initial_quantity: int = Field(default=0, description="Opening stock")
    low_stock_threshold: int | None = Field(
        default=None,
        description="Low stock threshold (defaults from settings)",
    )
    vendor: VendorInfo | None = Field(default=None, description="Supplier")
    note: str = Field(default="", description="Note for the ledger entry")


class RestockRequest(BaseModel):
    """Request to add purchased stock to an existing product."""

    product_id: str = Field(..., description="Product ID")
    quantity: int = Field(..., description="Units received")
    unit_price: Decimal = Field(..., description="Purchase price per unit")
    vendor: VendorInfo | None = Field(
        default=None,
        description="Supplier (defaults to the product's vendor)",
    )
    note: str = Field(default="", description="Free-text note")
    update_purchase_price: bool = Field(
        default=True,
        description="Store unit_price as the product's purchase price",
    )


# --- Sales ---


class CheckoutRequest(BaseModel):
    """Order-level options for a checkout."""

    transaction_id: str | None = Field(
        default=None,
        description="Client-chosen order id; re-submitting it is idempotent",
    )
    payment_type: PaymentType = Field(default=PaymentType.CASH)
    customer: CustomerInfo | None = Field(default=None)
    discount: Discount | None = Field(default=None)
    clear_cart: bool = Field(
        default=True,
        description="Empty the cart after a successful commit",
    )


class ListTransactionsRequest(BaseModel):
    """Filters for the sales history."""

    window: TimeWindow = Field(default=TimeWindow.ALL)
    actor: str | None = Field(default=None, description="Staff filter")
    payment_type: PaymentType | None = Field(default=None)
    search: str | None = Field(
        default=None,
        description="Matches customer name, mobile or product name",
    )
    limit: int | None = Field(default=None, ge=1)
