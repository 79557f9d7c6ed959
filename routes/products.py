"""
Product API routes.

Catalog CRUD and the stock (reorder) overview.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    StockLevel,
    StockOverviewResponse,
)
from services.product_service import get_product_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
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
# ROUTES
# ===================

@router.get("", response_model=list[ProductResponse])
async def list_products(
    include_inactive: bool = Query(False, description="Include inactive products")
):
    """List products ordered by name."""
    try:
        service = get_product_service()
        return service.get_all(active_only=not include_inactive)

    except Exception as e:
        return handle_error(e)


@router.get("/stock", response_model=StockOverviewResponse)
async def stock_overview(
    level: Optional[StockLevel] = Query(None, description="Only this stock level"),
    search: Optional[str] = Query(None, description="Name contains")
):
    """
    Stock levels for reordering.

    critical < 5 (or empty), low < 15, medium < 30, else good.
    """
    try:
        service = get_product_service()
        return service.get_stock_overview(level=level, search=search)

    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str):
    """
    Get a single product by ID.

    Raises:
        404: Product not found
    """
    try:
        service = get_product_service()
        return service.get_by_id(product_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(data: ProductCreate):
    """Create a new product."""
    try:
        service = get_product_service()
        return service.create(data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, data: ProductUpdate):
    """
    Update an existing product.

    Only provided fields are updated.
    """
    try:
        service = get_product_service()
        return service.update(product_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: str):
    """
    Delete a product (soft delete).

    Sets is_active=False rather than removing from database.
    """
    try:
        service = get_product_service()
        service.delete(product_id)
        return None  # 204 No Content

    except Exception as e:
        return handle_error(e)
