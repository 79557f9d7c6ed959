"""
Till API routes.

The cart is kept by the client. Every cart route takes the current cart
and returns the updated one; POST "" stores it as a receipt.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.checkout import (
    Cart,
    AddToCartRequest,
    UpdateCartLineRequest,
    RemoveCartLineRequest,
    CheckoutRequest,
    CheckoutResponse,
)
from services import checkout_service
from services.checkout_service import get_checkout_service
from services.price_service import get_price_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# CART
# ===================

@router.post("/cart/add", response_model=Cart)
async def add_to_cart(data: AddToCartRequest):
    """
    Add a product at its current price.

    Raises:
        422: No price set, or missing/invalid weight for KILO products
    """
    try:
        product = get_price_service().get_current_price(data.product_id)
        return checkout_service.add_product(data.cart, product, data.weight_kg)

    except Exception as e:
        return handle_error(e)


@router.post("/cart/quantity", response_model=Cart)
async def update_cart_quantity(data: UpdateCartLineRequest):
    """Set quantity of a per-piece line; 0 removes it."""
    try:
        return checkout_service.update_quantity(data.cart, data.product_id, data.value)

    except Exception as e:
        return handle_error(e)


@router.post("/cart/weight", response_model=Cart)
async def update_cart_weight(data: UpdateCartLineRequest):
    """Set weight of a per-kilo line; 0 removes it."""
    try:
        return checkout_service.update_weight(data.cart, data.product_id, data.value)

    except Exception as e:
        return handle_error(e)


@router.post("/cart/remove", response_model=Cart)
async def remove_from_cart(data: RemoveCartLineRequest):
    """Remove all lines of a product."""
    try:
        return checkout_service.remove_item(data.cart, data.product_id)

    except Exception as e:
        return handle_error(e)


# ===================
# CHECKOUT
# ===================

@router.post("", response_model=CheckoutResponse, status_code=201)
async def checkout(data: CheckoutRequest):
    """
    Store the cart as a receipt.

    Raises:
        422: Empty cart
    """
    try:
        service = get_checkout_service()
        return service.checkout(data.cart, note=data.note, sale_type=data.sale_type)

    except Exception as e:
        return handle_error(e)
