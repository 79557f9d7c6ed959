"""
Unit tests for the price calculator.

Run: pytest tests/unit/test_pricing_service.py -v
"""

import pytest
from decimal import Decimal

from models.pricing import FixedCosts, PricingInputs, PricingStatus
from services.pricing_service import (
    calculate,
    cost_markup_pct,
    break_even_per_day,
    cost_with_shrinkage,
    default_fixed_costs,
)
from exceptions import InvalidPricingInputError


def close(value: Decimal, expected: str, places: int = 3) -> bool:
    return round(value, places) == Decimal(expected)


@pytest.fixture
def example_inputs() -> PricingInputs:
    return PricingInputs(
        purchase_cost=Decimal("10"),
        shrink_rate=Decimal("0.1"),
        cost_markup_pct=Decimal("20"),
        profit_margin_pct=Decimal("0.3"),
        vat_rate=Decimal("0.09"),
    )


class TestCalculate:
    """Tests for calculate()"""

    def test_price_chain(self, example_inputs):
        result = calculate(example_inputs)

        assert result.status == PricingStatus.OK
        assert close(result.cost_with_shrinkage, "11.111")
        assert close(result.cost_price, "13.333")
        assert close(result.selling_price_excl_vat, "17.333")
        assert close(result.selling_price_incl_vat, "18.893")

    def test_profit_and_margin(self, example_inputs):
        result = calculate(example_inputs)

        assert close(result.profit_per_unit, "4.000")
        # (17.333 - 10) / 10 × 100
        assert close(result.total_margin_pct, "73.333")

    def test_values_are_not_rounded(self, example_inputs):
        result = calculate(example_inputs)

        assert result.cost_with_shrinkage != Decimal("11.11")
        assert result.cost_with_shrinkage.as_tuple().exponent < -2

    def test_markup_derived_from_fixed_costs(self):
        inputs = PricingInputs(
            purchase_cost=Decimal("10"),
            profit_margin_pct=Decimal("0"),
            fixed_costs=FixedCosts(rent=Decimal("1000"), car=0, staff=0, other=0),
            total_monthly_purchase=Decimal("5000"),
        )

        result = calculate(inputs)

        assert result.cost_markup_pct == Decimal("20")
        assert result.cost_price == Decimal("12")

    def test_zero_monthly_purchase_leaves_markup_undefined(self):
        inputs = PricingInputs(
            purchase_cost=Decimal("10"),
            profit_margin_pct=Decimal("0.3"),
            total_monthly_purchase=Decimal("0"),
        )

        result = calculate(inputs)

        assert result.status == PricingStatus.MARKUP_UNDEFINED
        assert result.cost_markup_pct is None
        assert result.cost_price is None
        assert result.selling_price_incl_vat is None
        assert result.cost_with_shrinkage == Decimal("10")

    def test_zero_work_days(self, example_inputs):
        result = calculate(example_inputs.model_copy(update={"work_days": 0}))

        assert result.break_even_per_day is None
        assert result.status == PricingStatus.OK

    def test_zero_purchase_cost_margin_is_zero(self, example_inputs):
        result = calculate(example_inputs.model_copy(update={"purchase_cost": Decimal("0")}))

        assert result.total_margin_pct == Decimal("0")
        assert result.selling_price_incl_vat == Decimal("0")

    def test_labor_cost(self, example_inputs):
        inputs = example_inputs.model_copy(update={
            "labor_minutes_per_unit": Decimal("6"),
            "hourly_labor_rate": Decimal("20"),
        })

        result = calculate(inputs)

        assert result.labor_cost_per_unit == Decimal("2")
        assert close(result.profit_after_labor, "2.000")

    def test_full_shrink_rejected(self, example_inputs):
        with pytest.raises(InvalidPricingInputError):
            calculate(example_inputs.model_copy(update={"shrink_rate": Decimal("1")}))


class TestHelpers:
    """Tests for the individual formula steps."""

    def test_cost_with_shrinkage(self):
        assert cost_with_shrinkage(Decimal("9"), Decimal("0.25")) == Decimal("12")

    def test_cost_markup_pct(self):
        assert cost_markup_pct(Decimal("4450"), Decimal("17800")) == Decimal("25")

    @pytest.mark.parametrize("purchases", [Decimal("0"), Decimal("-5")])
    def test_cost_markup_without_purchases(self, purchases):
        assert cost_markup_pct(Decimal("4450"), purchases) is None

    def test_break_even_per_day(self):
        assert break_even_per_day(Decimal("4450"), 25) == Decimal("178")
        assert break_even_per_day(Decimal("4450"), 0) is None

    def test_default_fixed_costs(self):
        fixed = default_fixed_costs()

        assert fixed.total == Decimal("4450")
