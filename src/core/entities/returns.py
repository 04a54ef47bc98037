"""Return record domain entities."""

from decimal import Decimal
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field

from src.core.entities.timestamps import Timestamp, utc_now
from src.core.entities.transaction import CustomerInfo


class ReturnRecord(BaseModel):
    """Append-only audit record of one returned transaction line."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    transaction_id: str
    line_id: str
    product_id: str
    product_name: str
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    refunded_amount: Decimal = Field(ge=0)
    reason: str = Field(min_length=1)
    actor: str
    customer: CustomerInfo | None = None
    inventory_adjusted: bool = True
    created_at: Timestamp = Field(default_factory=utc_now)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "ReturnRecord":
        return cls.model_validate(doc)
