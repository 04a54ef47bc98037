"""
Application layer - Use cases, DTOs and atomic execution.

This layer orchestrates business logic by:
1. Defining request DTOs for caller input
2. Implementing use cases that coordinate entities and the document store
3. Retrying atomic blocks on write conflicts

Use cases are the only entry point for callers.
"""

from src.application.atomic import execute_atomic
from src.application.dto.requests import (
    CheckoutRequest,
    ListTransactionsRequest,
    RecordInitialStockRequest,
    RestockRequest,
)
from src.application.use_cases import (
    CheckoutResult,
    CheckoutState,
    CheckoutUseCase,
    DeactivateProductUseCase,
    GetDashboardUseCase,
    GetTransactionUseCase,
    ListPurchaseHistoryUseCase,
    ListTransactionsUseCase,
    ProcessReturnUseCase,
    RecordInitialStockUseCase,
    RestockProductUseCase,
    ReturnResult,
)

__all__ = [
    # Request DTOs
    "RecordInitialStockRequest",
    "RestockRequest",
    "CheckoutRequest",
    "ListTransactionsRequest",
    # Use Cases
    "RecordInitialStockUseCase",
    "RestockProductUseCase",
    "DeactivateProductUseCase",
    "ListPurchaseHistoryUseCase",
    "CheckoutUseCase",
    "CheckoutResult",
    "CheckoutState",
    "ProcessReturnUseCase",
    "ReturnResult",
    "GetDashboardUseCase",
    "ListTransactionsUseCase",
    "GetTransactionUseCase",
    # Atomic execution
    "execute_atomic",
]
