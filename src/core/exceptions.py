"""
Domain exceptions for the Stockflow engine.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class StockflowError(Exception):
    """Base exception for all Stockflow errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for UI rendering."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(StockflowError):
    """Base exception for storage operations."""

    pass


class DocumentNotFoundError(StorageError):
    """Document not found in a collection."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(
            f"Document not found: {collection}/{doc_id}",
            code="DOCUMENT_NOT_FOUND",
            details={"collection": collection, "doc_id": doc_id},
        )


class WriteConflictError(StorageError):
    """A document read inside an atomic block changed before commit."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(
            f"Write conflict on {collection}/{doc_id}",
            code="WRITE_CONFLICT",
            details={"collection": collection, "doc_id": doc_id},
        )


class StoreUnavailableError(StorageError):
    """The document store could not be reached."""

    def __init__(self, operation: str, reason: str | None = None):
        super().__init__(
            f"Store unavailable during {operation}" + (f": {reason}" if reason else ""),
            code="STORE_UNAVAILABLE",
            details={"operation": operation, "reason": reason},
        )


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Validation Exceptions
class ValidationError(StockflowError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class InvalidQuantityError(ValidationError):
    """Quantity or unit price is out of range."""

    def __init__(self, field: str, value: Any, message: str | None = None):
        super().__init__(
            field=field,
            message=message or "must be greater than zero",
            value=value,
        )
        self.code = "INVALID_QUANTITY"


class InvalidProductError(ValidationError):
    """Product attributes are incomplete or inconsistent."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(field=field, message=message, value=value)
        self.code = "INVALID_PRODUCT"


class InvalidDiscountError(ValidationError):
    """Discount is negative or exceeds the order subtotal."""

    def __init__(self, message: str, value: Any = None):
        super().__init__(field="discount", message=message, value=value)
        self.code = "INVALID_DISCOUNT"


class EmptyCartError(ValidationError):
    """Checkout was requested for a cart with no lines."""

    def __init__(self) -> None:
        super().__init__(
            field="cart",
            message="Cart is empty. Add items before checking out.",
        )
        self.code = "EMPTY_CART"


class EmptyReasonError(ValidationError):
    """A return was requested without a reason."""

    def __init__(self) -> None:
        super().__init__(
            field="reason",
            message="A reason is required to process a return.",
        )
        self.code = "EMPTY_REASON"


# Auth Exceptions
class NotAuthenticatedError(StockflowError):
    """The operation requires an actor identity."""

    def __init__(self, operation: str):
        super().__init__(
            f"An authenticated user is required to {operation}",
            code="NOT_AUTHENTICATED",
            details={"operation": operation},
        )


# Inventory Exceptions
class InventoryError(StockflowError):
    """Base exception for stock-related failures."""

    pass


class InsufficientStockError(InventoryError):
    """Requested quantity exceeds the remaining stock of a product."""

    def __init__(
        self,
        product_id: str,
        product_name: str,
        requested: int,
        available: int,
    ):
        super().__init__(
            f"Insufficient stock for {product_name}: requested {requested}, "
            f"available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "product_name": product_name,
                "requested": requested,
                "available": available,
            },
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class ProductRemovedError(InventoryError):
    """A product in the cart no longer exists or has been disabled."""

    def __init__(self, product_id: str, product_name: str | None = None):
        label = product_name or product_id
        super().__init__(
            f"Product is no longer available: {label}",
            code="PRODUCT_REMOVED",
            details={"product_id": product_id, "product_name": product_name},
        )


class ProductNotFoundError(InventoryError):
    """Product does not exist."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class DuplicateProductError(InventoryError):
    """A product with the same id already exists."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product already exists: {product_id}",
            code="DUPLICATE_PRODUCT",
            details={"product_id": product_id},
        )


# Transaction Exceptions
class TransactionError(StockflowError):
    """Base exception for sale and return failures."""

    pass


class CommitConflictError(TransactionError):
    """An atomic operation could not be committed.

    ``unknown_outcome`` is set when the store timed out, in which case the
    caller must look the transaction up before retrying.
    """

    def __init__(self, operation: str, attempts: int, unknown_outcome: bool = False):
        if unknown_outcome:
            message = f"{operation} timed out; outcome unknown"
        else:
            message = f"{operation} failed after {attempts} conflicting attempts"
        super().__init__(
            message,
            code="COMMIT_CONFLICT",
            details={
                "operation": operation,
                "attempts": attempts,
                "unknown_outcome": unknown_outcome,
            },
        )
        self.unknown_outcome = unknown_outcome


class TransactionNotFoundError(TransactionError):
    """Transaction does not exist."""

    def __init__(self, transaction_id: str):
        super().__init__(
            f"Transaction not found: {transaction_id}",
            code="TRANSACTION_NOT_FOUND",
            details={"transaction_id": transaction_id},
        )


class TransactionLineNotFoundError(TransactionError):
    """Transaction exists but has no line with the given id."""

    def __init__(self, transaction_id: str, line_id: str):
        super().__init__(
            f"Line {line_id} not found on transaction {transaction_id}",
            code="TRANSACTION_LINE_NOT_FOUND",
            details={"transaction_id": transaction_id, "line_id": line_id},
        )


class AlreadyReturnedError(TransactionError):
    """The transaction line has already been returned."""

    def __init__(self, transaction_id: str, line_id: str, product_name: str):
        super().__init__(
            f"{product_name} on transaction {transaction_id} was already returned",
            code="ALREADY_RETURNED",
            details={
                "transaction_id": transaction_id,
                "line_id": line_id,
                "product_name": product_name,
            },
        )


class ConfigurationError(StockflowError):
    """Configuration error."""

    pass
