"""
Daily price API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.product import ProductWithPrice, PriceUpdate
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


@router.get("", response_model=list[ProductWithPrice])
async def list_prices(
    search: Optional[str] = Query(None, description="Name contains")
):
    """Products with their current price. price is null when never set."""
    try:
        service = get_price_service()
        return service.get_current_prices(search=search)

    except Exception as e:
        return handle_error(e)


@router.put("/{product_id}", response_model=ProductWithPrice)
async def set_price(product_id: str, data: PriceUpdate):
    """
    Set today's price for a product.

    Accepts "1,25" as well as 1.25.

    Raises:
        422: Not a valid amount
    """
    try:
        service = get_price_service()
        service.set_price(product_id, data.price)
        return service.get_current_price(product_id)

    except Exception as e:
        return handle_error(e)
