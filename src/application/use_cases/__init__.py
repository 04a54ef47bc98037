"""Application use cases."""

from src.application.use_cases.checkout import (
    CheckoutResult,
    CheckoutState,
    CheckoutUseCase,
    validate_discount,
)
from src.application.use_cases.get_dashboard import GetDashboardUseCase
from src.application.use_cases.list_transactions import (
    GetTransactionUseCase,
    ListTransactionsUseCase,
)
from src.application.use_cases.manage_products import (
    DeactivateProductUseCase,
    ListPurchaseHistoryUseCase,
)
from src.application.use_cases.process_return import (
    INVENTORY_ADJUSTMENT_SKIPPED,
    ProcessReturnUseCase,
    ReturnResult,
)
from src.application.use_cases.record_initial_stock import (
    RecordInitialStockResult,
    RecordInitialStockUseCase,
)
from src.application.use_cases.restock_product import (
    RestockProductUseCase,
    RestockResult,
)

__all__ = [
    # Stock
    "RecordInitialStockUseCase",
    "RecordInitialStockResult",
    "RestockProductUseCase",
    "RestockResult",
    "DeactivateProductUseCase",
    "ListPurchaseHistoryUseCase",
    # Sales
    "CheckoutUseCase",
    "CheckoutResult",
    "CheckoutState",
    "validate_discount",
    # Returns
    "ProcessReturnUseCase",
    "ReturnResult",
    "INVENTORY_ADJUSTMENT_SKIPPED",
    # Reporting
    "GetDashboardUseCase",
    "ListTransactionsUseCase",
    "GetTransactionUseCase",
]
