"""Core domain entities."""

from src.core.entities.cart import Cart, CartLine
from src.core.entities.dashboard import (
    DashboardSummary,
    TimeWindow,
    TopSellingProduct,
)
from src.core.entities.product import UNIT_TYPES, Product, VendorInfo
from src.core.entities.purchase import PurchaseEntry, PurchaseKind
from src.core.entities.returns import ReturnRecord
from src.core.entities.transaction import (
    CustomerInfo,
    Discount,
    DiscountType,
    PaymentType,
    Transaction,
    TransactionLine,
    TransactionStatus,
)

__all__ = [
    # Stock
    "Product",
    "VendorInfo",
    "UNIT_TYPES",
    "PurchaseEntry",
    "PurchaseKind",
    # Sales
    "Cart",
    "CartLine",
    "Transaction",
    "TransactionLine",
    "TransactionStatus",
    "PaymentType",
    "Discount",
    "DiscountType",
    "CustomerInfo",
    # Returns
    "ReturnRecord",
    # Reporting
    "DashboardSummary",
    "TimeWindow",
    "TopSellingProduct",
]
