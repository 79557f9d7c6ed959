"""
Sales and profit report schemas.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import Field, field_validator

from models.base import BaseSchema
from models.checkout import SaleType
from models.product import Unit
from models.pricing import FixedCosts


class ReportRange(str, Enum):
    """Receipt list window."""
    ALL = "all"
    TODAY = "today"
    WEEK = "week"  # Last 7 days


class ReceiptResponse(BaseSchema):
    """receipts row."""

    id: str
    created_at: datetime
    total_gross: Decimal
    sale_type: SaleType = SaleType.SHOP
    note: Optional[str] = None

    @field_validator("total_gross", mode="before")
    @classmethod
    def ensure_decimal(cls, v):
        return Decimal(str(v or 0))

    @field_validator("sale_type", mode="before")
    @classmethod
    def default_sale_type(cls, v):
        """Receipts from before sale types existed, or with unknown codes, count as shop sales."""
        return SaleType.from_stored(v)


class ReceiptItemResponse(BaseSchema):
    """receipt_items_view row."""

    product_name: str
    unit: Unit
    quantity: Optional[Decimal] = None
    weight_kg: Optional[Decimal] = None
    line_total: Decimal

    @field_validator("quantity", "weight_kg", "line_total", mode="before")
    @classmethod
    def ensure_decimal(cls, v):
        if v is not None:
            return Decimal(str(v))
        return v


class ReceiptDetail(BaseSchema):
    receipt_id: str
    items: list[ReceiptItemResponse]


class ReceiptListResponse(BaseSchema):
    data: list[ReceiptResponse]
    total: int
    range: ReportRange


class DailySalesRow(BaseSchema):
    """daily_sales view row: one product on one day."""

    sales_date: date
    product_name: str
    unit: Unit
    total_amount: Decimal
    total_revenue: Decimal

    @field_validator("total_amount", "total_revenue", mode="before")
    @classmethod
    def ensure_decimal(cls, v):
        return Decimal(str(v or 0))


class SaleTypeTotals(BaseSchema):
    sale_type: SaleType
    total: Decimal = Decimal("0")
    count: int = 0


class ProfitOverview(BaseSchema):
    """Net profit for one calendar month."""

    month: str = Field(..., description="YYYY-MM")
    period_start: datetime
    period_end: datetime
    sales_by_type: list[SaleTypeTotals]
    total_revenue: Decimal
    total_purchases: Decimal
    fixed_costs: FixedCosts
    total_fixed_costs: Decimal
    net_profit: Decimal
