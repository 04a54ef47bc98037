"""
In-memory cart for a single checkout.

The cart validates quantities against the product snapshot it was given.
Those checks are advisory: stock may change before commit, and the
checkout use case re-validates against live records.
"""

from collections.abc import Iterator
from decimal import Decimal

from pydantic import BaseModel, Field

from src.core.entities.product import Product
from src.core.exceptions import (
    InsufficientStockError,
    InvalidQuantityError,
    ProductRemovedError,
)


class CartLine(BaseModel):
    """A desired (product, quantity) pair with its add-time price."""

    product_id: str
    product_name: str
    unit_type: str = "piece"
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart(BaseModel):
    """Ordered mapping of product id to cart line."""

    lines: dict[str, CartLine] = Field(default_factory=dict)

    def add_line(self, product: Product, quantity: int) -> "Cart":
        """Add ``quantity`` of ``product``, merging with an existing line."""
        if quantity <= 0:
            raise InvalidQuantityError("quantity", quantity)
        existing = self.lines.get(product.id)
        combined = quantity + (existing.quantity if existing else 0)
        self._check_snapshot(product, combined)

        if existing is not None:
            existing.quantity = combined
        else:
            self.lines[product.id] = CartLine(
                product_id=product.id,
                product_name=product.name,
                unit_type=product.unit_type,
                quantity=combined,
                unit_price=product.price_per_unit,
            )
        return self

    def update_line(self, product: Product, new_quantity: int) -> "Cart":
        """Set the quantity for ``product``; zero or less removes the line."""
        if new_quantity <= 0:
            return self.remove_line(product.id)
        self._check_snapshot(product, new_quantity)

        existing = self.lines.get(product.id)
        if existing is not None:
            existing.quantity = new_quantity
        else:
            self.lines[product.id] = CartLine(
                product_id=product.id,
                product_name=product.name,
                unit_type=product.unit_type,
                quantity=new_quantity,
                unit_price=product.price_per_unit,
            )
        return self

    def remove_line(self, product_id: str) -> "Cart":
        self.lines.pop(product_id, None)
        return self

    def clear(self) -> "Cart":
        self.lines.clear()
        return self

    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines.values()), Decimal("0"))

    def get(self, product_id: str) -> CartLine | None:
        return self.lines.get(product_id)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def __len__(self) -> int:
        return len(self.lines)

    def iter_lines(self) -> Iterator[CartLine]:
        """Iterate lines in insertion order."""
        return iter(list(self.lines.values()))

    @staticmethod
    def _check_snapshot(product: Product, quantity: int) -> None:
        if not product.is_active:
            raise ProductRemovedError(product.id, product.name)
        if quantity > product.remaining_quantity:
            raise InsufficientStockError(
                product_id=product.id,
                product_name=product.name,
                requested=quantity,
                available=product.remaining_quantity,
            )
