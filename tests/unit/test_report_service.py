"""
Unit tests for ReportService.

Run: pytest tests/unit/test_report_service.py -v
"""

import pytest
from datetime import datetime
from decimal import Decimal

from models.checkout import SaleType
from models.pricing import FixedCosts
from models.reports import ReportRange
from services.report_service import ReportService, range_start, month_bounds
from exceptions import InvalidMonthError, ReceiptNotFoundError


class TestRangeStart:
    """Tests for range_start()"""

    def test_today_is_midnight(self):
        now = datetime(2026, 3, 14, 15, 42, 7)
        assert range_start(ReportRange.TODAY, now) == datetime(2026, 3, 14)

    def test_week_is_seven_days_back(self):
        now = datetime(2026, 3, 14, 15, 42, 7)
        assert range_start(ReportRange.WEEK, now) == datetime(2026, 3, 7, 15, 42, 7)

    def test_all_has_no_start(self):
        assert range_start(ReportRange.ALL) is None


class TestMonthBounds:
    """Tests for month_bounds()"""

    def test_february_leap_year(self):
        start, end = month_bounds("2028-02")

        assert start == datetime(2028, 2, 1)
        assert end == datetime(2028, 2, 29, 23, 59, 59)

    @pytest.mark.parametrize("month", ["2026", "2026-13", "2026-00", "maart", "0000-01", "2026-03-01"])
    def test_invalid_month(self, month):
        with pytest.raises(InvalidMonthError):
            month_bounds(month)


class TestReceipts:
    """Tests for receipts and daily sales."""

    def test_receipts_default_sale_type(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("receipts", [
            {"id": "r1", "created_at": "2026-03-14T10:00:00", "total_gross": 4.5, "sale_type": None, "note": None},
            {"id": "r2", "created_at": "2026-03-14T11:00:00", "total_gross": 12, "sale_type": "BEDRIJF", "note": "kantine"},
        ])

        receipts = ReportService().get_receipts()

        assert receipts[0].sale_type == SaleType.SHOP
        assert receipts[1].sale_type == SaleType.BUSINESS
        assert receipts[1].total_gross == Decimal("12")
        assert mock_supabase.calls_for("receipts", "gte") == []

    def test_unknown_sale_type_counts_as_shop(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("receipts", [
            {"id": "r1", "created_at": "2026-03-14T10:00:00", "total_gross": 2, "sale_type": "MARKT", "note": None},
        ])

        receipts = ReportService().get_receipts()

        assert receipts[0].sale_type == SaleType.SHOP

    def test_receipts_today_filters(self, mock_db, mock_supabase):
        ReportService().get_receipts(ReportRange.TODAY)

        (column, _), _ = mock_supabase.calls_for("receipts", "gte")[0]
        assert column == "created_at"

    def test_receipt_items(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("receipt_items_view", [
            {"product_name": "Appel", "unit": "STUK", "quantity": 3, "weight_kg": None, "line_total": 1.35},
            {"product_name": "Tomaten Tros", "unit": "KILO", "quantity": None, "weight_kg": 0.75, "line_total": 2.62},
        ])

        detail = ReportService().get_receipt_items("r1")

        assert detail.receipt_id == "r1"
        assert detail.items[1].weight_kg == Decimal("0.75")

    def test_receipt_without_lines(self, mock_db, mock_supabase):
        with pytest.raises(ReceiptNotFoundError):
            ReportService().get_receipt_items("missing")

    def test_daily_sales_week_filters_on_date(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("daily_sales", [
            {"sales_date": "2026-03-14", "product_name": "Appel", "unit": "STUK", "total_amount": 12, "total_revenue": 5.4},
        ])

        rows = ReportService().get_daily_sales(ReportRange.WEEK)

        assert rows[0].total_revenue == Decimal("5.4")
        (column, value), _ = mock_supabase.calls_for("daily_sales", "gte")[0]
        assert column == "sales_date"
        assert len(value) == 10


class TestProfitOverview:
    """Tests for get_profit_overview()"""

    def test_net_profit(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("receipts", [
            {"id": "r1", "sale_type": "WINKEL", "total_gross": 3000, "created_at": "2026-03-02T10:00:00"},
            {"id": "r2", "sale_type": None, "total_gross": 1000, "created_at": "2026-03-03T10:00:00"},
            {"id": "r3", "sale_type": "BESTELLING", "total_gross": 2500, "created_at": "2026-03-04T10:00:00"},
            {"id": "r4", "sale_type": "BEDRIJF", "total_gross": 1500.5, "created_at": "2026-03-05T10:00:00"},
        ])
        mock_supabase.set_table_data("purchase_orders", [
            {"total_amount": 1200},
            {"total_amount": 800.25},
        ])

        overview = ReportService().get_profit_overview("2026-03")

        by_type = {t.sale_type: t for t in overview.sales_by_type}
        assert by_type[SaleType.SHOP].total == Decimal("4000")
        assert by_type[SaleType.SHOP].count == 2
        assert by_type[SaleType.ORDER].total == Decimal("2500")
        assert by_type[SaleType.BUSINESS].total == Decimal("1500.5")
        assert overview.total_revenue == Decimal("8000.5")
        assert overview.total_purchases == Decimal("2000.25")
        assert overview.total_fixed_costs == Decimal("4450")
        # 8000.5 - 4450 - 2000.25
        assert overview.net_profit == Decimal("1550.25")

    def test_unknown_sale_type_counts_as_shop(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("receipts", [
            {"id": "r1", "sale_type": "MARKT", "total_gross": 40, "created_at": "2026-03-02T10:00:00"},
            {"id": "r2", "sale_type": "WINKEL", "total_gross": 10, "created_at": "2026-03-03T10:00:00"},
        ])

        overview = ReportService().get_profit_overview("2026-03")

        by_type = {t.sale_type: t for t in overview.sales_by_type}
        assert by_type[SaleType.SHOP].total == Decimal("50")
        assert by_type[SaleType.SHOP].count == 2
        assert overview.total_revenue == Decimal("50")

    def test_fixed_cost_override(self, mock_db, mock_supabase):
        fixed = FixedCosts(rent=Decimal("1000"), car=Decimal("0"), staff=Decimal("0"), other=Decimal("0"))

        overview = ReportService().get_profit_overview("2026-03", fixed_costs=fixed)

        assert overview.total_fixed_costs == Decimal("1000")
        assert overview.net_profit == Decimal("-1000")

    def test_invalid_month_makes_no_call(self, mock_db, mock_supabase):
        with pytest.raises(InvalidMonthError):
            ReportService().get_profit_overview("march")

        assert mock_supabase.calls == []
