"""Product / stock record domain entities."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from src.core.entities.timestamps import Timestamp, utc_now
from src.core.exceptions import InsufficientStockError

UNIT_TYPES = ("meter", "kilogram", "piece", "box")

STOCK_FIELDS = (
    "purchased_quantity",
    "sold_quantity",
    "remaining_quantity",
    "purchase_price_per_unit",
    "last_restock_at",
    "updated_at",
)


class VendorInfo(BaseModel):
    """Supplier details attached to products and purchase entries."""

    name: str | None = None
    contact: str | None = None
    description: str | None = None


class Product(BaseModel):
    """
    Canonical per-product stock state.

    Quantities are cumulative counters; the saleable quantity is derived as
    ``purchased_quantity - sold_quantity`` and must never go negative.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    category: str = ""
    sub_category: str = ""
    unit_type: str = "piece"

    # Pricing
    price_per_unit: Decimal = Field(ge=0)
    purchase_price_per_unit: Decimal | None = Field(default=None, ge=0)

    # Stock counters
    purchased_quantity: int = Field(ge=0)
    sold_quantity: int = Field(ge=0)
    low_stock_threshold: int = Field(default=5, ge=0)

    vendor: VendorInfo | None = None
    is_active: bool = True

    # Timestamps
    created_at: Timestamp = Field(default_factory=utc_now)
    updated_at: Timestamp = Field(default_factory=utc_now)
    last_restock_at: Timestamp | None = None

    @model_validator(mode="after")
    def check_remaining(self) -> "Product":
        """Reject records that would be oversold."""
        if self.sold_quantity > self.purchased_quantity:
            raise ValueError(
                f"sold_quantity ({self.sold_quantity}) exceeds "
                f"purchased_quantity ({self.purchased_quantity})"
            )
        return self

    @property
    def remaining_quantity(self) -> int:
        return self.purchased_quantity - self.sold_quantity

    @property
    def is_out_of_stock(self) -> bool:
        return self.remaining_quantity == 0

    @property
    def is_low_stock(self) -> bool:
        return self.remaining_quantity <= self.low_stock_threshold

    def sell(self, quantity: int, at: datetime) -> None:
        """Move ``quantity`` units from remaining to sold."""
        if quantity > self.remaining_quantity:
            raise InsufficientStockError(
                product_id=self.id,
                product_name=self.name,
                requested=quantity,
                available=self.remaining_quantity,
            )
        self.sold_quantity += quantity
        self.updated_at = at

    def receive(self, quantity: int, at: datetime) -> None:
        """Add purchased units."""
        self.purchased_quantity += quantity
        self.last_restock_at = at
        self.updated_at = at

    def restore(self, quantity: int, at: datetime) -> None:
        """Give back returned units, flooring sold at zero."""
        self.sold_quantity = max(0, self.sold_quantity - quantity)
        self.updated_at = at

    def to_document(self) -> dict[str, Any]:
        """Serialize for the document store.

        ``remaining_quantity`` is denormalized so stores can filter on it;
        it is recomputed from the counters when read back.
        """
        doc = self.model_dump(mode="json")
        doc["remaining_quantity"] = self.remaining_quantity
        return doc

    def stock_fields(self) -> dict[str, Any]:
        """Partial document carrying only the stock counters and timestamps."""
        doc = self.to_document()
        return {key: doc[key] for key in STOCK_FIELDS}

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Product":
        return cls.model_validate(doc)
