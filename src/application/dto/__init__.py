"""Data Transfer Objects for engine callers.

Request DTOs validate and parse caller input. Results are returned as
domain entities or use case result dataclasses.
"""

from src.application.dto.requests import (
    CheckoutRequest,
    ListTransactionsRequest,
    RecordInitialStockRequest,
    RestockRequest,
)

__all__ = [
    "RecordInitialStockRequest",
    "RestockRequest",
    "CheckoutRequest",
    "ListTransactionsRequest",
]
