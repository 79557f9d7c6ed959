"""
Pydantic models for validation and serialization.

Working state (carts, reconciliation) uses frozen models; every
operation returns a new instance.
"""

from models.base import (
    BaseSchema,
    FrozenSchema,
    TimestampMixin,
)
from models.product import (
    Unit,
    StockLevel,
    CatalogProduct,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductWithPrice,
    PriceUpdate,
    StockOverviewItem,
    StockOverviewResponse,
)
from models.purchase_order import (
    ScannedEntry,
    LineItem,
    UnmatchedEntry,
    ReconciliationState,
    PurchaseTotals,
    ReconciliationResponse,
    ScanResponse,
    PurchaseOrderSave,
    PurchaseOrderResponse,
    PurchaseOrderItemResponse,
    PurchaseOrderDetail,
    PurchaseOrderListResponse,
)
from models.pricing import (
    PricingStatus,
    FixedCosts,
    PricingInputs,
    PricingResult,
)
from models.checkout import (
    SaleType,
    CartItem,
    Cart,
    CheckoutRequest,
    CheckoutResponse,
)
from models.reports import (
    ReportRange,
    ReceiptResponse,
    ReceiptItemResponse,
    ReceiptDetail,
    ReceiptListResponse,
    DailySalesRow,
    SaleTypeTotals,
    ProfitOverview,
)

__all__ = [
    # Base
    "BaseSchema",
    "FrozenSchema",
    "TimestampMixin",

    # Product
    "Unit",
    "StockLevel",
    "CatalogProduct",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductWithPrice",
    "PriceUpdate",
    "StockOverviewItem",
    "StockOverviewResponse",

    # Purchase order
    "ScannedEntry",
    "LineItem",
    "UnmatchedEntry",
    "ReconciliationState",
    "PurchaseTotals",
    "ReconciliationResponse",
    "ScanResponse",
    "PurchaseOrderSave",
    "PurchaseOrderResponse",
    "PurchaseOrderItemResponse",
    "PurchaseOrderDetail",
    "PurchaseOrderListResponse",

    # Pricing
    "PricingStatus",
    "FixedCosts",
    "PricingInputs",
    "PricingResult",

    # Checkout
    "SaleType",
    "CartItem",
    "Cart",
    "CheckoutRequest",
    "CheckoutResponse",

    # Reports
    "ReportRange",
    "ReceiptResponse",
    "ReceiptItemResponse",
    "ReceiptDetail",
    "ReceiptListResponse",
    "DailySalesRow",
    "SaleTypeTotals",
    "ProfitOverview",
]
