"""
Purchase order (delivery note) routes.

Intake flow:
    1. POST /scan (photo) or POST /reconcile (entries) → state + totals
    2. POST /reconciliation/* to resolve, skip, add and edit lines
    3. POST "" with the final state to store it and book stock

The reconciliation state is owned by the client and sent with every call.
"""

from datetime import datetime
from fastapi import APIRouter, File, Query, UploadFile
from fastapi.responses import JSONResponse
import structlog

from models.purchase_order import (
    ReconciliationState,
    ReconciliationResponse,
    ReconcileRequest,
    ScanResponse,
    SelectMatchRequest,
    SkipUnmatchedRequest,
    ManualLineItemRequest,
    LineItemEditRequest,
    LineItemRemoveRequest,
    PurchaseOrderSave,
    PurchaseOrderDetail,
    PurchaseOrderListResponse,
)
from services import reconciliation_service
from services.product_service import get_product_service
from services.purchase_order_service import get_purchase_order_service
from services.receipt_scanner_service import get_receipt_scanner_service
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


def _respond(state: ReconciliationState) -> ReconciliationResponse:
    return ReconciliationResponse(
        state=state,
        totals=reconciliation_service.calculate_totals(state)
    )


def _catalog_product(product_id: str):
    return get_product_service().get_by_id(product_id).to_catalog()


# ===================
# INTAKE
# ===================

@router.post("/scan", response_model=ScanResponse)
async def scan_delivery_note(file: UploadFile = File(...)):
    """
    Read a delivery note photo and match it against the catalog.

    Raises:
        422: Scanner output unusable (retry or enter manually)
        503: Scanner unavailable
    """
    try:
        catalog = get_product_service().get_catalog()
        contents = await file.read()

        scanner = get_receipt_scanner_service()
        scanned = await scanner.scan_image(
            contents,
            media_type=file.content_type or "image/jpeg",
            known_product_names=[p.name for p in catalog]
        )

        state = reconciliation_service.reconcile(scanned, catalog)
        totals = reconciliation_service.calculate_totals(state)

        logger.info(
            "delivery_note_scanned",
            filename=file.filename,
            matched=len(state.matched),
            unmatched=len(state.unmatched)
        )

        return ScanResponse(
            state=state,
            totals=totals,
            scanned=scanned,
            scanned_at=datetime.utcnow()
        )

    except Exception as e:
        return handle_error(e)


@router.post("/reconcile", response_model=ReconciliationResponse)
async def reconcile_entries(data: ReconcileRequest):
    """Match entries (e.g. a corrected scan) against the catalog."""
    try:
        catalog = get_product_service().get_catalog()
        return _respond(reconciliation_service.reconcile(data.entries, catalog))

    except Exception as e:
        return handle_error(e)


# ===================
# RECONCILIATION ACTIONS
# ===================

@router.post("/reconciliation/select-match", response_model=ReconciliationResponse)
async def select_match(data: SelectMatchRequest):
    """Resolve an unmatched entry to the chosen product."""
    try:
        product = _catalog_product(data.product_id)
        return _respond(
            reconciliation_service.select_match(data.state, data.unmatched_index, product)
        )

    except Exception as e:
        return handle_error(e)


@router.post("/reconciliation/skip", response_model=ReconciliationResponse)
async def skip_unmatched(data: SkipUnmatchedRequest):
    """Drop an unmatched entry."""
    try:
        return _respond(reconciliation_service.skip_unmatched(data.state, data.unmatched_index))

    except Exception as e:
        return handle_error(e)


@router.post("/reconciliation/manual", response_model=ReconciliationResponse)
async def add_manual_line(data: ManualLineItemRequest):
    """Add a line by hand (boxes and units per box at least 1)."""
    try:
        product = _catalog_product(data.product_id)
        return _respond(reconciliation_service.add_manual_line_item(
            data.state,
            product,
            data.box_count,
            data.units_per_box,
            data.unit_price
        ))

    except Exception as e:
        return handle_error(e)


@router.post("/reconciliation/units-per-box", response_model=ReconciliationResponse)
async def update_units_per_box(data: LineItemEditRequest):
    """Set units per box; total units follow."""
    try:
        return _respond(
            reconciliation_service.update_units_per_box(data.state, data.index, data.value)
        )

    except Exception as e:
        return handle_error(e)


@router.post("/reconciliation/total-units", response_model=ReconciliationResponse)
async def update_total_units(data: LineItemEditRequest):
    """Override total units for mixed boxes."""
    try:
        return _respond(
            reconciliation_service.update_total_units(data.state, data.index, data.value)
        )

    except Exception as e:
        return handle_error(e)


@router.post("/reconciliation/unit-price", response_model=ReconciliationResponse)
async def update_unit_price(data: LineItemEditRequest):
    """Correct a line's purchase price."""
    try:
        return _respond(
            reconciliation_service.update_unit_price(data.state, data.index, data.value)
        )

    except Exception as e:
        return handle_error(e)


@router.post("/reconciliation/remove", response_model=ReconciliationResponse)
async def remove_line(data: LineItemRemoveRequest):
    """Remove a matched line."""
    try:
        return _respond(reconciliation_service.remove_line_item(data.state, data.index))

    except Exception as e:
        return handle_error(e)


# ===================
# PURCHASE ORDERS
# ===================

@router.get("", response_model=PurchaseOrderListResponse)
async def list_purchase_orders(
    limit: int = Query(10, ge=1, le=100, description="Number of orders")
):
    """Most recent purchase orders."""
    try:
        orders = get_purchase_order_service().list_recent(limit=limit)
        return PurchaseOrderListResponse(data=orders, total=len(orders))

    except Exception as e:
        return handle_error(e)


@router.get("/{order_id}", response_model=PurchaseOrderDetail)
async def get_purchase_order(order_id: str):
    """Purchase order with its lines."""
    try:
        return get_purchase_order_service().get_detail(order_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=PurchaseOrderDetail, status_code=201)
async def save_purchase_order(data: PurchaseOrderSave):
    """
    Store a reconciled delivery note and add its units to stock.

    Raises:
        409: Unmatched entries remain and confirm_unmatched is false
        422: No matched lines
    """
    try:
        service = get_purchase_order_service()
        return service.save(
            data.state,
            supplier=data.supplier,
            confirm_unmatched=data.confirm_unmatched
        )

    except Exception as e:
        return handle_error(e)


@router.delete("/{order_id}", status_code=204)
async def delete_purchase_order(order_id: str):
    """Delete a purchase order and take its units back out of stock."""
    try:
        get_purchase_order_service().delete(order_id)
        return None

    except Exception as e:
        return handle_error(e)
