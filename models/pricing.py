"""
Price calculator schemas.

Inputs and derived results of the cost/selling price chain:
purchase cost → shrinkage → cost markup → margin → VAT.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import Field

from models.base import BaseSchema


class PricingStatus(str, Enum):
    """Whether every price in the chain could be derived."""
    OK = "OK"
    MARKUP_UNDEFINED = "MARKUP_UNDEFINED"  # No monthly purchase total to spread fixed costs over


class FixedCosts(BaseSchema):
    """Monthly fixed costs (EUR)."""

    rent: Decimal = Field(Decimal("0"), ge=0)
    car: Decimal = Field(Decimal("0"), ge=0)
    staff: Decimal = Field(Decimal("0"), ge=0)
    other: Decimal = Field(Decimal("0"), ge=0)

    @property
    def total(self) -> Decimal:
        return self.rent + self.car + self.staff + self.other


class PricingInputs(BaseSchema):
    """
    Calculator inputs.

    Rates are fractions (0.09 = 9%, 0.3 = 30%). cost_markup_pct is a
    percentage (20 = 20%); when omitted it is derived from fixed_costs
    and total_monthly_purchase.
    """

    purchase_cost: Decimal = Field(..., ge=0, description="Purchase price per unit")
    vat_rate: Decimal = Field(Decimal("0.09"), ge=0, description="VAT as a fraction")
    shrink_rate: Decimal = Field(Decimal("0"), ge=0, description="Expected loss as a fraction")
    profit_margin_pct: Decimal = Field(..., ge=0, description="Margin on cost price as a fraction")
    labor_minutes_per_unit: Decimal = Field(Decimal("0"), ge=0)
    hourly_labor_rate: Decimal = Field(Decimal("0"), ge=0)

    cost_markup_pct: Optional[Decimal] = Field(None, ge=0, description="Explicit cost markup in %")
    fixed_costs: Optional[FixedCosts] = None
    total_monthly_purchase: Decimal = Field(Decimal("0"), description="Purchases per month (EUR)")
    work_days: int = Field(26, ge=0, description="Working days per month")


class PricingResult(BaseSchema):
    """
    Derived prices. Unrounded; format for display only.

    Price fields are None when status is MARKUP_UNDEFINED.
    """

    status: PricingStatus
    cost_with_shrinkage: Decimal
    total_fixed_costs: Decimal
    cost_markup_pct: Optional[Decimal] = None
    cost_price: Optional[Decimal] = None
    selling_price_excl_vat: Optional[Decimal] = None
    selling_price_incl_vat: Optional[Decimal] = None
    profit_per_unit: Optional[Decimal] = None
    total_margin_pct: Optional[Decimal] = None
    break_even_per_day: Optional[Decimal] = None
    labor_cost_per_unit: Decimal = Decimal("0")
    profit_after_labor: Optional[Decimal] = None
