"""
Sales and profit report routes.
"""

from decimal import Decimal
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from typing import Optional
import structlog

from models.pricing import FixedCosts
from models.reports import (
    DailySalesRow,
    ProfitOverview,
    ReceiptDetail,
    ReceiptListResponse,
    ReportRange,
)
from services.pricing_service import default_fixed_costs
from services.report_service import get_report_service
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


@router.get("/receipts", response_model=ReceiptListResponse)
async def list_receipts(
    range: ReportRange = Query(ReportRange.ALL, description="all, today or week (last 7 days)")
):
    """Receipts in the window, newest first."""
    try:
        receipts = get_report_service().get_receipts(range)
        return ReceiptListResponse(data=receipts, total=len(receipts), range=range)

    except Exception as e:
        return handle_error(e)


@router.get("/receipts/{receipt_id}", response_model=ReceiptDetail)
async def get_receipt(receipt_id: str):
    """Lines of one receipt."""
    try:
        return get_report_service().get_receipt_items(receipt_id)

    except Exception as e:
        return handle_error(e)


@router.get("/daily-sales", response_model=list[DailySalesRow])
async def daily_sales(
    range: ReportRange = Query(ReportRange.ALL, description="all, today or week (last 7 days)")
):
    """Quantity and revenue per product per day."""
    try:
        return get_report_service().get_daily_sales(range)

    except Exception as e:
        return handle_error(e)


@router.get("/profit", response_model=ProfitOverview)
async def profit_overview(
    month: str = Query(..., description="Month as YYYY-MM"),
    rent: Optional[Decimal] = Query(None, ge=0),
    car: Optional[Decimal] = Query(None, ge=0),
    staff: Optional[Decimal] = Query(None, ge=0),
    other: Optional[Decimal] = Query(None, ge=0),
):
    """
    Net profit for a month: revenue − fixed costs − purchases.

    Fixed costs default to the configured values; any of them can be
    overridden per request.
    """
    try:
        defaults = default_fixed_costs()
        fixed = FixedCosts(
            rent=defaults.rent if rent is None else rent,
            car=defaults.car if car is None else car,
            staff=defaults.staff if staff is None else staff,
            other=defaults.other if other is None else other,
        )
        return get_report_service().get_profit_overview(month, fixed_costs=fixed)

    except Exception as e:
        return handle_error(e)
