"""
Business logic services.

Each service handles one domain area. Matching, reconciliation, pricing
and cart operations are pure functions; the classes wrap store access.
"""

from services.product_service import ProductService, get_product_service, classify_stock
from services.price_service import PriceService, get_price_service
from services.checkout_service import CheckoutService, get_checkout_service
from services.purchase_order_service import PurchaseOrderService, get_purchase_order_service
from services.receipt_scanner_service import ReceiptScannerService, get_receipt_scanner_service
from services.report_service import ReportService, get_report_service
from services.matching_service import find_best_match, find_candidates, score_candidate

__all__ = [
    "ProductService",
    "get_product_service",
    "classify_stock",
    "PriceService",
    "get_price_service",
    "CheckoutService",
    "get_checkout_service",
    "PurchaseOrderService",
    "get_purchase_order_service",
    "ReceiptScannerService",
    "get_receipt_scanner_service",
    "ReportService",
    "get_report_service",
    "find_best_match",
    "find_candidates",
    "score_candidate",
]
