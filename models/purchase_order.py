"""
Purchase order schemas.

Covers the in-memory reconciliation of a scanned delivery note
(ScannedEntry → LineItem / UnmatchedEntry) and the persisted
purchase order rows.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import Field, computed_field, field_validator

from models.base import BaseSchema, FrozenSchema, TimestampMixin
from models.product import CatalogProduct
from utils.money import round2


class ScannedEntry(FrozenSchema):
    """Raw product/quantity/price guess from the scanner or a manual form."""

    raw_name: str = Field(..., min_length=1, description="Name as read from the delivery note")
    quantity: Decimal = Field(..., ge=0, description="Boxes/packs on the note")
    unit_price: Decimal = Field(..., ge=0, description="Price per unit on the note")


class LineItem(FrozenSchema):
    """
    Delivery note line tied to a catalog product.

    line_total is always derived from total_units × unit_price.
    total_units starts as box_count × units_per_box but may be
    corrected on its own when box contents vary.
    """

    product_id: str
    product_name: str
    box_count: Decimal = Field(..., ge=0, description="Boxes/packs delivered")
    units_per_box: int = Field(1, ge=1, description="Sellable units per box")
    total_units: Decimal = Field(..., ge=0, description="Units added to stock")
    unit_price: Decimal = Field(..., ge=0, description="Purchase price per unit")
    matched: bool = True

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return round2(self.total_units * self.unit_price)


class UnmatchedEntry(FrozenSchema):
    """Scanned entry without a confident catalog match."""

    scanned_name: str
    quantity: Decimal = Field(..., ge=0)
    price: Decimal = Field(..., ge=0)
    suggestions: list[CatalogProduct] = Field(default_factory=list)


class ReconciliationState(FrozenSchema):
    """
    Working state of one delivery note intake.

    Owned by the client; every operation takes a state and returns a new one.
    """

    matched: list[LineItem] = Field(default_factory=list)
    unmatched: list[UnmatchedEntry] = Field(default_factory=list)


class PurchaseTotals(BaseSchema):
    """Aggregates derived from the matched lines."""

    subtotal: Decimal
    tax: Decimal
    total_incl_tax: Decimal
    vat_rate: Decimal
    line_count: int
    unmatched_count: int


class ReconciliationResponse(BaseSchema):
    """State plus its derived totals, returned after every action."""

    state: ReconciliationState
    totals: PurchaseTotals


# ===================
# REQUEST BODIES
# ===================

class ReconcileRequest(BaseSchema):
    """Reconcile entries (typically from a scan the client edited)."""

    entries: list[ScannedEntry]


class SelectMatchRequest(BaseSchema):
    state: ReconciliationState
    unmatched_index: int = Field(..., ge=0)
    product_id: str


class SkipUnmatchedRequest(BaseSchema):
    state: ReconciliationState
    unmatched_index: int = Field(..., ge=0)


class ManualLineItemRequest(BaseSchema):
    state: ReconciliationState
    product_id: str
    box_count: Decimal = Decimal("1")
    units_per_box: int = 1
    unit_price: Decimal = Decimal("0")


class LineItemEditRequest(BaseSchema):
    """Edit one matched line: units per box, total units or unit price."""

    state: ReconciliationState
    index: int = Field(..., ge=0)
    value: Decimal


class LineItemRemoveRequest(BaseSchema):
    state: ReconciliationState
    index: int = Field(..., ge=0)


class PurchaseOrderSave(BaseSchema):
    """Persist a reconciled delivery note."""

    state: ReconciliationState
    supplier: Optional[str] = Field(None, max_length=255)
    confirm_unmatched: bool = Field(
        False,
        description="Save even though unmatched scan entries remain"
    )


# ===================
# PERSISTED ROWS
# ===================

class PurchaseOrderResponse(TimestampMixin, BaseSchema):
    """purchase_orders row."""

    id: str
    supplier: Optional[str] = None
    subtotal: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    total_amount: Decimal

    @field_validator("subtotal", "tax_amount", "total_amount", mode="before")
    @classmethod
    def ensure_decimal(cls, v):
        if v is not None:
            return Decimal(str(v))
        return v


class PurchaseOrderItemResponse(BaseSchema):
    """purchase_order_items row joined with the product name."""

    product_id: Optional[str] = None
    product_name: str = "Unknown"
    quantity: Decimal
    units_per_box: int = 1
    actual_quantity: Decimal
    unit_price: Optional[Decimal] = None
    line_total: Optional[Decimal] = None

    @field_validator("quantity", "actual_quantity", "unit_price", "line_total", mode="before")
    @classmethod
    def ensure_decimal(cls, v):
        if v is not None:
            return Decimal(str(v))
        return v


class PurchaseOrderDetail(BaseSchema):
    """Purchase order with its lines."""

    order: PurchaseOrderResponse
    items: list[PurchaseOrderItemResponse]


class PurchaseOrderListResponse(BaseSchema):
    data: list[PurchaseOrderResponse]
    total: int


class ScanResponse(ReconciliationResponse):
    """Reconciliation result of a scanned image, plus what was read."""

    scanned: list[ScannedEntry]
    scanned_at: datetime
