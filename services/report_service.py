"""
Sales and profit reporting.

Receipts and daily sales come from the till tables and views;
the monthly profit overview combines them with purchase orders and
fixed costs:

    net profit = revenue − fixed costs − purchases
"""

import calendar
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional
import structlog

from config import get_supabase_client
from models.checkout import SaleType
from models.pricing import FixedCosts
from models.reports import (
    DailySalesRow,
    ProfitOverview,
    ReceiptDetail,
    ReceiptItemResponse,
    ReceiptResponse,
    ReportRange,
    SaleTypeTotals,
)
from services.pricing_service import default_fixed_costs
from exceptions import DatabaseError, InvalidMonthError, ReceiptNotFoundError

logger = structlog.get_logger(__name__)


def range_start(report_range: ReportRange, now: Optional[datetime] = None) -> Optional[datetime]:
    """
    Start of a report window.

    TODAY: midnight today. WEEK: now minus 7 days. ALL: None.
    """
    now = now or datetime.now()
    if report_range == ReportRange.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if report_range == ReportRange.WEEK:
        return now - timedelta(days=7)
    return None


def month_bounds(month: str) -> tuple[datetime, datetime]:
    """
    First and last second of a YYYY-MM month.

    Raises:
        InvalidMonthError: Bad format or month out of range
    """
    try:
        year_text, month_text = month.split("-")
        year, month_num = int(year_text), int(month_text)
        last_day = calendar.monthrange(year, month_num)[1]
        start = datetime(year, month_num, 1)
        end = datetime(year, month_num, last_day, 23, 59, 59)
    except ValueError:
        raise InvalidMonthError(month)

    return start, end


class ReportService:
    """Read-only reporting over receipts and purchase orders."""

    def __init__(self):
        self.db = get_supabase_client()

    # ===================
    # RECEIPTS
    # ===================

    def get_receipts(self, report_range: ReportRange = ReportRange.ALL) -> list[ReceiptResponse]:
        """Receipts in the window, newest first."""
        logger.info("getting_receipts", range=report_range.value)

        try:
            query = (
                self.db.table("receipts")
                .select("id,created_at,total_gross,sale_type,note")
                .order("created_at", desc=True)
            )

            start = range_start(report_range)
            if start:
                query = query.gte("created_at", start.isoformat())

            result = query.execute()

        except Exception as e:
            logger.error("get_receipts_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [ReceiptResponse(**row) for row in result.data]

    def get_receipt_items(self, receipt_id: str) -> ReceiptDetail:
        """
        Lines of one receipt.

        Raises:
            ReceiptNotFoundError: No lines for this receipt
        """
        try:
            result = (
                self.db.table("receipt_items_view")
                .select("product_name,unit,quantity,weight_kg,line_total")
                .eq("receipt_id", receipt_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_receipt_items_failed", receipt_id=receipt_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ReceiptNotFoundError(receipt_id)

        return ReceiptDetail(
            receipt_id=receipt_id,
            items=[ReceiptItemResponse(**row) for row in result.data]
        )

    def get_daily_sales(self, report_range: ReportRange = ReportRange.ALL) -> list[DailySalesRow]:
        """Quantity and revenue per product per day, newest day first."""
        try:
            query = (
                self.db.table("daily_sales")
                .select("*")
                .order("sales_date", desc=True)
            )

            start = range_start(report_range)
            if start:
                query = query.gte("sales_date", start.date().isoformat())

            result = query.execute()

        except Exception as e:
            logger.error("get_daily_sales_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [DailySalesRow(**row) for row in result.data]

    # ===================
    # PROFIT
    # ===================

    def get_profit_overview(
        self,
        month: str,
        fixed_costs: Optional[FixedCosts] = None
    ) -> ProfitOverview:
        """
        Net profit for one month.

        Args:
            month: "YYYY-MM"
            fixed_costs: Overrides the configured monthly fixed costs

        Raises:
            InvalidMonthError: Bad month format (no store call made)
        """
        start, end = month_bounds(month)
        fixed = fixed_costs or default_fixed_costs()

        logger.info("getting_profit_overview", month=month)

        try:
            receipts = (
                self.db.table("receipts")
                .select("id,sale_type,total_gross,created_at")
                .gte("created_at", start.isoformat())
                .lte("created_at", end.isoformat())
                .execute()
            )

            purchases = (
                self.db.table("purchase_orders")
                .select("total_amount")
                .gte("created_at", start.isoformat())
                .lte("created_at", end.isoformat())
                .execute()
            )

        except Exception as e:
            logger.error("get_profit_overview_failed", month=month, error=str(e))
            raise DatabaseError("select", str(e))

        by_type = {sale_type: SaleTypeTotals(sale_type=sale_type) for sale_type in SaleType}

        for row in receipts.data:
            sale_type = SaleType.from_stored(row.get("sale_type"))
            totals = by_type[sale_type]
            totals.total += Decimal(str(row.get("total_gross") or 0))
            totals.count += 1

        total_revenue = sum((t.total for t in by_type.values()), Decimal("0"))
        total_purchases = sum(
            (Decimal(str(row.get("total_amount") or 0)) for row in purchases.data),
            Decimal("0")
        )

        overview = ProfitOverview(
            month=month,
            period_start=start,
            period_end=end,
            sales_by_type=list(by_type.values()),
            total_revenue=total_revenue,
            total_purchases=total_purchases,
            fixed_costs=fixed,
            total_fixed_costs=fixed.total,
            net_profit=total_revenue - fixed.total - total_purchases
        )

        logger.info(
            "profit_overview_calculated",
            month=month,
            receipts=len(receipts.data),
            revenue=str(total_revenue),
            net_profit=str(overview.net_profit)
        )

        return overview


# Singleton instance
_report_service: Optional[ReportService] = None


def get_report_service() -> ReportService:
    """Get or create ReportService instance."""
    global _report_service
    if _report_service is None:
        _report_service = ReportService()
    return _report_service
