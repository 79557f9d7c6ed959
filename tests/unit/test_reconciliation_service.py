"""
Unit tests for delivery note reconciliation.

Run: pytest tests/unit/test_reconciliation_service.py -v
"""

import pytest
from decimal import Decimal

from models.purchase_order import ScannedEntry
from services.reconciliation_service import (
    reconcile,
    select_match,
    skip_unmatched,
    add_manual_line_item,
    update_units_per_box,
    update_total_units,
    update_unit_price,
    remove_line_item,
    calculate_totals,
    validate_for_save,
)
from exceptions import (
    EmptyPurchaseOrderError,
    UnmatchedItemsPendingError,
    LineItemIndexError,
)
from tests.factories import PurchaseOrderFactory


def entry(name: str, quantity="1", price="1.00") -> ScannedEntry:
    return ScannedEntry(raw_name=name, quantity=Decimal(quantity), unit_price=Decimal(price))


# ===================
# RECONCILE
# ===================

class TestReconcile:
    """Tests for reconcile()"""

    def test_exact_match_has_no_suggestions(self, catalog):
        state = reconcile([entry("appel", "4", "0.50")], catalog)

        assert len(state.matched) == 1
        assert state.unmatched == []
        line = state.matched[0]
        assert line.product_id == "p-appel"
        assert line.units_per_box == 1
        assert line.total_units == Decimal("4")

    def test_containment_match_line_total(self, catalog):
        state = reconcile([entry("bananen", "3", "1.2")], catalog)

        line = state.matched[0]
        assert line.product_name == "Bio Bananen"
        assert line.total_units == Decimal("3")
        assert line.line_total == Decimal("3.60")

    def test_unmatched_entry_keeps_scan_data_and_suggestions(self, catalog):
        state = reconcile([entry("paprika groen", "2", "0.99")], catalog)

        assert state.matched == []
        unmatched = state.unmatched[0]
        assert unmatched.scanned_name == "paprika groen"
        assert unmatched.quantity == Decimal("2")
        assert unmatched.price == Decimal("0.99")
        assert [s.name for s in unmatched.suggestions] == ["Rode Paprika"]

    def test_every_entry_lands_in_exactly_one_list(self, catalog):
        scanned = [
            entry("Appel"),
            entry("komkommer"),
            entry("bananen"),
            entry("spruitjes"),
            entry("prei"),
        ]

        state = reconcile(scanned, catalog)

        assert len(state.matched) + len(state.unmatched) == len(scanned)
        assert [m.product_name for m in state.matched] == ["Appel", "Bio Bananen", "Prei"]
        assert [u.scanned_name for u in state.unmatched] == ["komkommer", "spruitjes"]

    def test_empty_scan(self, catalog):
        state = reconcile([], catalog)
        assert state.matched == [] and state.unmatched == []

    def test_empty_catalog_leaves_everything_unmatched(self):
        state = reconcile([entry("Appel")], [])

        assert state.matched == []
        assert state.unmatched[0].suggestions == []


# ===================
# USER RESOLUTION
# ===================

class TestSelectAndSkip:
    """Tests for select_match() and skip_unmatched()"""

    def test_select_match_moves_entry_to_matched(self, catalog):
        state = reconcile([entry("komkommer", "2", "0.75")], catalog)

        new_state = select_match(state, 0, catalog[0])

        assert new_state.unmatched == []
        line = new_state.matched[0]
        assert line.product_id == "p-appel"
        assert line.total_units == Decimal("2")
        assert line.line_total == Decimal("1.50")

    def test_select_match_does_not_mutate_input(self, catalog):
        state = reconcile([entry("komkommer")], catalog)

        select_match(state, 0, catalog[0])

        assert len(state.unmatched) == 1
        assert state.matched == []

    def test_skip_keeps_order_of_remaining(self, catalog):
        state = reconcile([entry("komkommer"), entry("spruitjes"), entry("andijvie")], catalog)

        new_state = skip_unmatched(state, 1)

        assert [u.scanned_name for u in new_state.unmatched] == ["komkommer", "andijvie"]

    def test_skipped_entry_not_in_totals(self, catalog):
        state = reconcile([entry("appel", "1", "2.00"), entry("komkommer", "5", "3.00")], catalog)

        totals = calculate_totals(skip_unmatched(state, 0))

        assert totals.subtotal == Decimal("2.00")
        assert totals.unmatched_count == 0

    @pytest.mark.parametrize("index", [1, 5])
    def test_out_of_range_index_raises(self, catalog, index):
        state = reconcile([entry("komkommer")], catalog)

        with pytest.raises(LineItemIndexError) as exc_info:
            skip_unmatched(state, index)

        assert exc_info.value.code == "INDEX_OUT_OF_RANGE"


class TestManualLineItem:
    """Tests for add_manual_line_item()"""

    def test_adds_line_with_box_math(self, catalog):
        state = add_manual_line_item(PurchaseOrderFactory.state(), catalog[1], 2, 6, "0.25")

        line = state.matched[0]
        assert line.box_count == Decimal("2")
        assert line.units_per_box == 6
        assert line.total_units == Decimal("12")
        assert line.line_total == Decimal("3.00")

    def test_clamps_inputs(self, catalog):
        state = add_manual_line_item(PurchaseOrderFactory.state(), catalog[0], 0, -3, "-1")

        line = state.matched[0]
        assert line.box_count == Decimal("1")
        assert line.units_per_box == 1
        assert line.total_units == Decimal("1")
        assert line.unit_price == Decimal("0")


# ===================
# LINE EDITS
# ===================

class TestLineEdits:
    """Tests for the matched line editors."""

    def test_units_per_box_recomputes_total(self):
        state = PurchaseOrderFactory.state(matched=[PurchaseOrderFactory.line(box_count="3", unit_price="0.40")])

        new_state = update_units_per_box(state, 0, 10)

        line = new_state.matched[0]
        assert line.units_per_box == 10
        assert line.total_units == Decimal("30")
        assert line.line_total == Decimal("12.00")

    def test_units_per_box_minimum_one(self):
        state = PurchaseOrderFactory.state(matched=[PurchaseOrderFactory.line(box_count="3")])

        line = update_units_per_box(state, 0, 0).matched[0]

        assert line.units_per_box == 1
        assert line.total_units == Decimal("3")

    def test_total_units_override_is_decoupled(self):
        state = PurchaseOrderFactory.state(
            matched=[PurchaseOrderFactory.line(box_count="2", units_per_box=12, unit_price="0.50")]
        )

        line = update_total_units(state, 0, 22).matched[0]

        assert line.units_per_box == 12
        assert line.total_units == Decimal("22")
        assert line.line_total == Decimal("11.00")

    def test_total_units_minimum_one(self):
        state = PurchaseOrderFactory.state(matched=[PurchaseOrderFactory.line()])

        assert update_total_units(state, 0, 0).matched[0].total_units == Decimal("1")

    def test_unit_price_update_and_rounding(self):
        state = PurchaseOrderFactory.state(matched=[PurchaseOrderFactory.line(box_count="3")])

        line = update_unit_price(state, 0, Decimal("0.335")).matched[0]

        # 3 × 0.335 = 1.005 → 1.01 (half up)
        assert line.line_total == Decimal("1.01")

    def test_unit_price_minimum_zero(self):
        state = PurchaseOrderFactory.state(matched=[PurchaseOrderFactory.line()])

        assert update_unit_price(state, 0, -2).matched[0].unit_price == Decimal("0")

    def test_remove_line(self):
        state = PurchaseOrderFactory.state(matched=[
            PurchaseOrderFactory.line(product_id="a"),
            PurchaseOrderFactory.line(product_id="b"),
        ])

        new_state = remove_line_item(state, 0)

        assert [m.product_id for m in new_state.matched] == ["b"]
        assert len(state.matched) == 2

    def test_edit_out_of_range(self):
        with pytest.raises(LineItemIndexError):
            update_unit_price(PurchaseOrderFactory.state(), 0, 1)


# ===================
# TOTALS & SAVE CHECKS
# ===================

class TestTotals:
    """Tests for calculate_totals()"""

    def test_totals_use_nine_percent_vat(self):
        state = PurchaseOrderFactory.state(matched=[
            PurchaseOrderFactory.line(box_count="2", unit_price="1.50"),
            PurchaseOrderFactory.line(box_count="4", unit_price="1.75"),
        ])

        totals = calculate_totals(state)

        assert totals.subtotal == Decimal("10.00")
        assert totals.tax == Decimal("0.9")
        assert totals.total_incl_tax == Decimal("10.9")
        assert totals.line_count == 2

    def test_explicit_rate(self):
        state = PurchaseOrderFactory.state(matched=[PurchaseOrderFactory.line(box_count="1", unit_price="10")])

        totals = calculate_totals(state, vat_rate=Decimal("0.21"))

        assert totals.tax == Decimal("2.1")

    def test_empty_state(self):
        totals = calculate_totals(PurchaseOrderFactory.state())

        assert totals.subtotal == Decimal("0")
        assert totals.total_incl_tax == Decimal("0")


class TestValidateForSave:
    """Tests for validate_for_save()"""

    def test_empty_matched_rejected(self):
        state = PurchaseOrderFactory.state(unmatched=[PurchaseOrderFactory.unmatched()])

        with pytest.raises(EmptyPurchaseOrderError):
            validate_for_save(state, confirm_unmatched=True)

    def test_unmatched_requires_confirmation(self):
        state = PurchaseOrderFactory.state(
            matched=[PurchaseOrderFactory.line()],
            unmatched=[PurchaseOrderFactory.unmatched("komkommer")]
        )

        with pytest.raises(UnmatchedItemsPendingError) as exc_info:
            validate_for_save(state)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["confirmation_required"] is True

    def test_confirmed_unmatched_passes(self):
        state = PurchaseOrderFactory.state(
            matched=[PurchaseOrderFactory.line()],
            unmatched=[PurchaseOrderFactory.unmatched()]
        )

        validate_for_save(state, confirm_unmatched=True)

    def test_all_matched_passes(self):
        validate_for_save(PurchaseOrderFactory.state(matched=[PurchaseOrderFactory.line()]))
