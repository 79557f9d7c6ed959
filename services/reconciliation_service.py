"""
Delivery note reconciliation.

Turns scanned entries into purchase order lines against the catalog
and applies the user's corrections. Every function takes a
ReconciliationState and returns a new one; nothing here touches the
database.
"""

from decimal import Decimal
from typing import Optional, Sequence
import structlog

from config import settings
from models.product import CatalogProduct
from models.purchase_order import (
    ScannedEntry,
    LineItem,
    UnmatchedEntry,
    ReconciliationState,
    PurchaseTotals,
)
from services.matching_service import find_best_match, find_candidates
from exceptions import (
    EmptyPurchaseOrderError,
    UnmatchedItemsPendingError,
    LineItemIndexError,
)
from utils.money import to_decimal

logger = structlog.get_logger(__name__)

ONE = Decimal("1")
ZERO = Decimal("0")


def _line_from_scan(product: CatalogProduct, quantity: Decimal, price: Decimal) -> LineItem:
    return LineItem(
        product_id=product.id,
        product_name=product.name,
        box_count=quantity,
        units_per_box=1,
        total_units=quantity,
        unit_price=price,
        matched=True
    )


def _rebuild(item: LineItem, **changes) -> LineItem:
    """Copy a line through validation (model_copy would skip it)."""
    return LineItem(**{**item.model_dump(exclude={"line_total"}), **changes})


def _check_index(collection: str, items: Sequence, index: int) -> None:
    if index < 0 or index >= len(items):
        raise LineItemIndexError(collection, index, len(items))


# ===================
# RECONCILE
# ===================

def reconcile(
    scanned: Sequence[ScannedEntry],
    catalog: Sequence[CatalogProduct]
) -> ReconciliationState:
    """
    Partition scanned entries into matched lines and unmatched entries.

    Each entry lands in exactly one of the two lists, in input order.

    Args:
        scanned: Entries from the scanner or a manual list
        catalog: Active products

    Returns:
        New ReconciliationState
    """
    matched: list[LineItem] = []
    unmatched: list[UnmatchedEntry] = []

    for entry in scanned:
        product = find_best_match(entry.raw_name, catalog)

        if product:
            matched.append(_line_from_scan(product, entry.quantity, entry.unit_price))
        else:
            unmatched.append(UnmatchedEntry(
                scanned_name=entry.raw_name,
                quantity=entry.quantity,
                price=entry.unit_price,
                suggestions=find_candidates(entry.raw_name, catalog)
            ))

    logger.info(
        "scan_reconciled",
        scanned=len(scanned),
        matched=len(matched),
        unmatched=len(unmatched)
    )

    return ReconciliationState(matched=matched, unmatched=unmatched)


# ===================
# USER RESOLUTION
# ===================

def select_match(
    state: ReconciliationState,
    unmatched_index: int,
    product: CatalogProduct
) -> ReconciliationState:
    """Resolve an unmatched entry to the product the user picked."""
    _check_index("unmatched", state.unmatched, unmatched_index)

    entry = state.unmatched[unmatched_index]
    line = _line_from_scan(product, entry.quantity, entry.price)

    logger.info(
        "unmatched_entry_resolved",
        scanned_name=entry.scanned_name,
        product_id=product.id
    )

    return ReconciliationState(
        matched=[*state.matched, line],
        unmatched=[u for i, u in enumerate(state.unmatched) if i != unmatched_index]
    )


def skip_unmatched(state: ReconciliationState, unmatched_index: int) -> ReconciliationState:
    """Drop an unmatched entry. It is excluded from totals and from saving."""
    _check_index("unmatched", state.unmatched, unmatched_index)

    logger.info(
        "unmatched_entry_skipped",
        scanned_name=state.unmatched[unmatched_index].scanned_name
    )

    return ReconciliationState(
        matched=list(state.matched),
        unmatched=[u for i, u in enumerate(state.unmatched) if i != unmatched_index]
    )


def add_manual_line_item(
    state: ReconciliationState,
    product: CatalogProduct,
    box_count,
    units_per_box,
    unit_price
) -> ReconciliationState:
    """
    Append a line entered by hand.

    box_count and units_per_box are raised to at least 1,
    unit_price to at least 0.
    """
    boxes = max(ONE, to_decimal(box_count))
    per_box = max(1, int(units_per_box))
    price = max(ZERO, to_decimal(unit_price))

    line = LineItem(
        product_id=product.id,
        product_name=product.name,
        box_count=boxes,
        units_per_box=per_box,
        total_units=boxes * per_box,
        unit_price=price,
        matched=True
    )

    logger.info("manual_line_added", product_id=product.id, total_units=str(line.total_units))

    return ReconciliationState(matched=[*state.matched, line], unmatched=list(state.unmatched))


def _replace_line(state: ReconciliationState, index: int, line: LineItem) -> ReconciliationState:
    matched = list(state.matched)
    matched[index] = line
    return ReconciliationState(matched=matched, unmatched=list(state.unmatched))


def update_units_per_box(state: ReconciliationState, index: int, value) -> ReconciliationState:
    """Set units per box (min 1) and recompute total_units = box_count × units_per_box."""
    _check_index("matched", state.matched, index)

    item = state.matched[index]
    per_box = max(1, int(value))

    return _replace_line(
        state,
        index,
        _rebuild(item, units_per_box=per_box, total_units=item.box_count * per_box)
    )


def update_total_units(state: ReconciliationState, index: int, value) -> ReconciliationState:
    """
    Override total units (min 1).

    Left decoupled from units_per_box so mixed boxes can be corrected.
    """
    _check_index("matched", state.matched, index)

    total = max(ONE, to_decimal(value))

    return _replace_line(state, index, _rebuild(state.matched[index], total_units=total))


def update_unit_price(state: ReconciliationState, index: int, value) -> ReconciliationState:
    """Correct the purchase price of a line (min 0)."""
    _check_index("matched", state.matched, index)

    price = max(ZERO, to_decimal(value))

    return _replace_line(state, index, _rebuild(state.matched[index], unit_price=price))


def remove_line_item(state: ReconciliationState, index: int) -> ReconciliationState:
    """Remove a matched line."""
    _check_index("matched", state.matched, index)

    return ReconciliationState(
        matched=[m for i, m in enumerate(state.matched) if i != index],
        unmatched=list(state.unmatched)
    )


# ===================
# TOTALS & SAVE CHECKS
# ===================

def calculate_totals(
    state: ReconciliationState,
    vat_rate: Optional[Decimal] = None
) -> PurchaseTotals:
    """
    Derive subtotal, tax and total from the matched lines.

    Not rounded beyond the per-line cent rounding; format for display.
    """
    rate = settings.purchase_vat_rate if vat_rate is None else to_decimal(vat_rate)
    subtotal = sum((item.line_total for item in state.matched), ZERO)

    return PurchaseTotals(
        subtotal=subtotal,
        tax=subtotal * rate,
        total_incl_tax=subtotal * (ONE + rate),
        vat_rate=rate,
        line_count=len(state.matched),
        unmatched_count=len(state.unmatched)
    )


def validate_for_save(state: ReconciliationState, confirm_unmatched: bool = False) -> None:
    """
    Check a state can be persisted.

    Raises:
        EmptyPurchaseOrderError: No matched lines, whatever is unmatched
        UnmatchedItemsPendingError: Unmatched entries and no confirmation
    """
    if not state.matched:
        raise EmptyPurchaseOrderError(unmatched_count=len(state.unmatched))

    if state.unmatched and not confirm_unmatched:
        raise UnmatchedItemsPendingError([u.scanned_name for u in state.unmatched])
