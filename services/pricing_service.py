"""
Price calculator.

Purchase price + shrinkage + cost markup = cost price,
cost price + margin = selling price, + VAT = shelf price.

Cost markup is the share of monthly fixed costs (rent, car, staff, other)
in monthly purchases. It is not profit; it only covers the overhead.

Values are never rounded here. A zero monthly purchase total leaves the
markup undefined and every price that depends on it comes back as None.
"""

from decimal import Decimal
from typing import Optional
import structlog

from config import settings
from models.pricing import FixedCosts, PricingInputs, PricingResult, PricingStatus
from exceptions import InvalidPricingInputError

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
MINUTES_PER_HOUR = Decimal("60")


def default_fixed_costs() -> FixedCosts:
    """Monthly fixed costs from settings."""
    return FixedCosts(
        rent=settings.fixed_cost_rent,
        car=settings.fixed_cost_car,
        staff=settings.fixed_cost_staff,
        other=settings.fixed_cost_other
    )


def cost_with_shrinkage(purchase_cost: Decimal, shrink_rate: Decimal) -> Decimal:
    """Spread expected loss over the units that do sell."""
    if shrink_rate >= ONE:
        raise InvalidPricingInputError(
            "Shrink rate must be below 100%",
            details={"shrink_rate": str(shrink_rate)}
        )
    return purchase_cost / (ONE - shrink_rate)


def cost_markup_pct(total_fixed_costs: Decimal, total_monthly_purchase: Decimal) -> Optional[Decimal]:
    """Fixed costs as a percentage of purchases; None without purchases."""
    if total_monthly_purchase <= ZERO:
        return None
    return total_fixed_costs / total_monthly_purchase * HUNDRED


def break_even_per_day(total_fixed_costs: Decimal, work_days: int) -> Optional[Decimal]:
    """Revenue needed per working day to cover fixed costs; None without work days."""
    if work_days <= 0:
        return None
    return total_fixed_costs / Decimal(work_days)


def calculate(inputs: PricingInputs) -> PricingResult:
    """
    Run the full price chain.

    Args:
        inputs: Calculator inputs; cost_markup_pct overrides the derived markup

    Returns:
        PricingResult (unrounded)

    Raises:
        InvalidPricingInputError: If shrink_rate >= 1
    """
    fixed = inputs.fixed_costs or default_fixed_costs()
    total_fixed = fixed.total

    shrunk = cost_with_shrinkage(inputs.purchase_cost, inputs.shrink_rate)

    markup = inputs.cost_markup_pct
    if markup is None:
        markup = cost_markup_pct(total_fixed, inputs.total_monthly_purchase)

    labor_cost = inputs.labor_minutes_per_unit / MINUTES_PER_HOUR * inputs.hourly_labor_rate
    break_even = break_even_per_day(total_fixed, inputs.work_days)

    if markup is None:
        logger.warning(
            "pricing_markup_undefined",
            total_monthly_purchase=str(inputs.total_monthly_purchase)
        )
        return PricingResult(
            status=PricingStatus.MARKUP_UNDEFINED,
            cost_with_shrinkage=shrunk,
            total_fixed_costs=total_fixed,
            break_even_per_day=break_even,
            labor_cost_per_unit=labor_cost
        )

    cost_price = shrunk * (ONE + markup / HUNDRED)
    selling_excl = cost_price * (ONE + inputs.profit_margin_pct)
    selling_incl = selling_excl * (ONE + inputs.vat_rate)
    profit = selling_excl - cost_price

    if inputs.purchase_cost == ZERO:
        margin_pct = ZERO
    else:
        margin_pct = (selling_excl - inputs.purchase_cost) / inputs.purchase_cost * HUNDRED

    return PricingResult(
        status=PricingStatus.OK,
        cost_with_shrinkage=shrunk,
        total_fixed_costs=total_fixed,
        cost_markup_pct=markup,
        cost_price=cost_price,
        selling_price_excl_vat=selling_excl,
        selling_price_incl_vat=selling_incl,
        profit_per_unit=profit,
        total_margin_pct=margin_pct,
        break_even_per_day=break_even,
        labor_cost_per_unit=labor_cost,
        profit_after_labor=profit - labor_cost
    )
