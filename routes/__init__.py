"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.prices import router as prices_router
from routes.checkout import router as checkout_router
from routes.purchase_orders import router as purchase_orders_router
from routes.pricing import router as pricing_router
from routes.reports import router as reports_router

__all__ = [
    "products_router",
    "prices_router",
    "checkout_router",
    "purchase_orders_router",
    "pricing_router",
    "reports_router",
]
