"""
Price calculator API routes.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.pricing import FixedCosts, PricingInputs, PricingResult
from services import pricing_service
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


@router.get("/fixed-costs", response_model=FixedCosts)
async def get_fixed_costs():
    """Configured monthly fixed costs (calculator defaults)."""
    return pricing_service.default_fixed_costs()


@router.post("/calculate", response_model=PricingResult)
async def calculate_price(data: PricingInputs):
    """
    Cost price and selling price for one product.

    status is MARKUP_UNDEFINED (and prices null) when there are no
    monthly purchases to spread fixed costs over.

    Raises:
        422: Shrink rate of 100% or more
    """
    try:
        return pricing_service.calculate(data)

    except Exception as e:
        return handle_error(e)
