"""Sale transaction domain entities."""

from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator

from src.core.entities.timestamps import Timestamp, utc_now


class TransactionStatus(str, Enum):
    """Transaction lifecycle status."""

    COMPLETED = "completed"


class PaymentType(str, Enum):
    """How the customer paid."""

    CASH = "cash"
    CARD = "card"
    UPI = "upi"
    OTHER = "other"


class DiscountType(str, Enum):
    """Discount interpretation."""

    PERCENT = "percent"
    FLAT = "flat"


class Discount(BaseModel):
    """Order-level discount."""

    type: DiscountType = DiscountType.PERCENT
    value: Decimal = Decimal("0")

    def amount_for(self, subtotal: Decimal) -> Decimal:
        """Discount amount for a given subtotal."""
        if self.type == DiscountType.PERCENT:
            return subtotal * self.value / Decimal("100")
        return self.value


class CustomerInfo(BaseModel):
    """Optional walk-in customer details."""

    name: str | None = None
    mobile: str | None = None
    email: str | None = None


class TransactionLine(BaseModel):
    """
    One sold product on a transaction.

    Name and unit price are snapshots taken at commit time. Only the
    return fields change after creation.
    """

    line_id: str = Field(default_factory=lambda: str(uuid4()))
    product_id: str
    product_name: str
    unit_type: str = "piece"
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    line_total: Decimal = Decimal("0")  # quantity * unit_price

    # Return state
    is_returned: bool = False
    return_id: str | None = None
    return_reason: str | None = None
    returned_at: Timestamp | None = None
    returned_by: str | None = None

    @model_validator(mode="after")
    def compute_line(self) -> "TransactionLine":
        """Compute line_total from quantity and unit_price."""
        self.line_total = self.unit_price * self.quantity
        return self


class Transaction(BaseModel):
    """A committed sale with immutable line snapshots."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    lines: list[TransactionLine] = Field(default_factory=list)
    total: Decimal = Decimal("0")  # sum of line totals
    discount: Discount | None = None
    discount_amount: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")  # total - discount, floored at 0

    payment_type: PaymentType = PaymentType.CASH
    customer: CustomerInfo | None = None
    actor: str
    status: TransactionStatus = TransactionStatus.COMPLETED

    created_at: Timestamp = Field(default_factory=utc_now)
    updated_at: Timestamp = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def compute_totals(self) -> "Transaction":
        """Compute total, discount_amount and grand_total from lines."""
        self.total = sum((line.line_total for line in self.lines), Decimal("0"))
        self.discount_amount = (
            self.discount.amount_for(self.total) if self.discount else Decimal("0")
        )
        self.grand_total = max(Decimal("0"), self.total - self.discount_amount)
        return self

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def returned_amount(self) -> Decimal:
        return sum(
            (line.line_total for line in self.lines if line.is_returned),
            Decimal("0"),
        )

    @property
    def net_total(self) -> Decimal:
        """Grand total less refunded lines."""
        return max(Decimal("0"), self.grand_total - self.returned_amount)

    @property
    def is_fully_returned(self) -> bool:
        return bool(self.lines) and all(line.is_returned for line in self.lines)

    def find_line(self, line_id: str) -> TransactionLine | None:
        for line in self.lines:
            if line.line_id == line_id:
                return line
        return None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Transaction":
        return cls.model_validate(doc)
