"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    DatabaseError,

    # Products & prices
    ProductNotFoundError,
    InvalidPriceError,
    PriceNotSetError,

    # Purchase orders
    PurchaseOrderNotFoundError,
    EmptyPurchaseOrderError,
    UnmatchedItemsPendingError,
    LineItemIndexError,

    # Scanner
    ScanParseError,

    # Checkout
    InvalidWeightError,
    EmptyCartError,

    # Reports & pricing
    ReceiptNotFoundError,
    InvalidMonthError,
    InvalidPricingInputError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "DatabaseError",

    # Products & prices
    "ProductNotFoundError",
    "InvalidPriceError",
    "PriceNotSetError",

    # Purchase orders
    "PurchaseOrderNotFoundError",
    "EmptyPurchaseOrderError",
    "UnmatchedItemsPendingError",
    "LineItemIndexError",

    # Scanner
    "ScanParseError",

    # Checkout
    "InvalidWeightError",
    "EmptyCartError",

    # Reports & pricing
    "ReceiptNotFoundError",
    "InvalidMonthError",
    "InvalidPricingInputError",
]
