"""Purchase ledger domain entities."""

from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from src.core.entities.product import VendorInfo
from src.core.entities.timestamps import Timestamp, utc_now


class PurchaseKind(str, Enum):
    """Kinds of stock-increasing events."""

    INITIAL_STOCK = "initial_stock"
    RESTOCK = "restock"


class PurchaseEntry(BaseModel):
    """Append-only record of one stock-increasing event."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    product_id: str
    product_name: str  # snapshot at purchase time
    kind: PurchaseKind
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    total_cost: Decimal = Decimal("0")  # quantity * unit_price
    vendor: VendorInfo | None = None
    note: str = ""
    actor: str | None = None
    created_at: Timestamp = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def compute_total(self) -> "PurchaseEntry":
        """Compute total_cost from quantity and unit_price."""
        self.total_cost = self.unit_price * self.quantity
        return self

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "PurchaseEntry":
        return cls.model_validate(doc)
