"""
Custom exception classes for the application.

Every error carries a stable code, a human-readable message, an HTTP
status and optional details; routes turn them into JSON with to_dict().
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# PRODUCT ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


class InvalidPriceError(ValidationError):
    """Price input is not a valid non-negative amount."""

    def __init__(self, value: Any):
        super().__init__(
            code="INVALID_PRICE",
            message="Enter a valid amount",
            details={"provided": str(value)}
        )


class PriceNotSetError(ValidationError):
    """Product has no current price and cannot be sold."""

    def __init__(self, product_id: str, name: str):
        super().__init__(
            code="PRICE_NOT_SET",
            message=f"No price set for \"{name}\". Set a daily price first.",
            details={"product_id": product_id, "name": name}
        )


# ===================
# PURCHASE ORDER ERRORS
# ===================

class PurchaseOrderNotFoundError(NotFoundError):
    """Purchase order not found."""

    def __init__(self, order_id: str):
        super().__init__(
            resource="Purchase order",
            identifier=order_id,
            code="PURCHASE_ORDER_NOT_FOUND"
        )


class EmptyPurchaseOrderError(ValidationError):
    """Purchase order has no matched line items."""

    def __init__(self, unmatched_count: int = 0):
        super().__init__(
            code="PURCHASE_ORDER_EMPTY",
            message="Add at least 1 product",
            details={"unmatched_count": unmatched_count}
        )


class UnmatchedItemsPendingError(ConflictError):
    """Unmatched scan entries remain; saving needs explicit confirmation."""

    def __init__(self, scanned_names: list[str]):
        super().__init__(
            code="UNMATCHED_ITEMS_PENDING",
            message=f"{len(scanned_names)} scanned items are not matched. Confirm to save without them.",
            details={
                "unmatched_count": len(scanned_names),
                "scanned_names": scanned_names,
                "confirmation_required": True
            }
        )


class LineItemIndexError(ValidationError):
    """Index does not point at an existing entry."""

    def __init__(self, collection: str, index: int, size: int):
        super().__init__(
            code="INDEX_OUT_OF_RANGE",
            message=f"No {collection} entry at index {index}",
            details={"collection": collection, "index": index, "size": size}
        )


# ===================
# SCANNER ERRORS
# ===================

class ScanParseError(ValidationError):
    """AI scan output could not be turned into scanned entries."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="SCAN_PARSE_ERROR",
            message=message,
            details={
                "hint": "Retry the scan or enter the products manually",
                **(details or {})
            }
        )


# ===================
# CHECKOUT ERRORS
# ===================

class InvalidWeightError(ValidationError):
    """Weight for a per-kilo product must be positive."""

    def __init__(self, value: Any):
        super().__init__(
            code="INVALID_WEIGHT",
            message="Invalid weight",
            details={"provided": str(value)}
        )


class EmptyCartError(ValidationError):
    """Checkout attempted with an empty cart."""

    def __init__(self):
        super().__init__(
            code="CART_EMPTY",
            message="Cart is empty"
        )


# ===================
# REPORT ERRORS
# ===================

class ReceiptNotFoundError(NotFoundError):
    """Receipt not found."""

    def __init__(self, receipt_id: str):
        super().__init__(
            resource="Receipt",
            identifier=receipt_id,
            code="RECEIPT_NOT_FOUND"
        )


class InvalidMonthError(ValidationError):
    """Month is not in YYYY-MM format."""

    def __init__(self, month: str):
        super().__init__(
            code="INVALID_MONTH",
            message="Month must be in YYYY-MM format",
            details={"provided": month}
        )


class InvalidPricingInputError(ValidationError):
    """Pricing inputs cannot produce a cost price."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_PRICING_INPUT",
            message=message,
            details=details
        )
