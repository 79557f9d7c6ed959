"""
Purchase order (delivery note) persistence.

Saving writes the order header, its lines, and then adds each line's
units to product stock. Deleting reverses the stock change first.
"""

from decimal import Decimal
from typing import Optional
import structlog

from config import get_supabase_client
from models.purchase_order import (
    ReconciliationState,
    PurchaseOrderResponse,
    PurchaseOrderItemResponse,
    PurchaseOrderDetail,
)
from services.product_service import get_product_service
from services.reconciliation_service import calculate_totals, validate_for_save
from exceptions import DatabaseError, PurchaseOrderNotFoundError
from utils.money import round2
from utils.text_utils import clean_supplier_name

logger = structlog.get_logger(__name__)


class PurchaseOrderService:
    """
    Purchase order business logic.

    Reconciliation itself is pure (services.reconciliation_service);
    this service only validates and stores the result.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "purchase_orders"
        self.items_table = "purchase_order_items"

    # ===================
    # READ OPERATIONS
    # ===================

    def list_recent(self, limit: int = 10) -> list[PurchaseOrderResponse]:
        """Most recent purchase orders, newest first."""
        logger.info("getting_purchase_orders", limit=limit)

        try:
            result = (
                self.db.table(self.table)
                .select("id,created_at,supplier,subtotal,tax_amount,total_amount")
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )

            return [PurchaseOrderResponse(**row) for row in result.data]

        except Exception as e:
            logger.error("get_purchase_orders_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_id(self, order_id: str) -> PurchaseOrderResponse:
        """
        Get one purchase order header.

        Raises:
            PurchaseOrderNotFoundError: If the order doesn't exist
        """
        try:
            result = (
                self.db.table(self.table)
                .select("id,created_at,supplier,subtotal,tax_amount,total_amount")
                .eq("id", order_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_purchase_order_failed", order_id=order_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise PurchaseOrderNotFoundError(order_id)

        return PurchaseOrderResponse(**result.data[0])

    def get_items(self, order_id: str) -> list[PurchaseOrderItemResponse]:
        """Lines of a purchase order with product names."""
        logger.debug("getting_purchase_order_items", order_id=order_id)

        try:
            result = (
                self.db.table(self.items_table)
                .select(
                    "product_id,quantity,units_per_box,actual_quantity,"
                    "unit_price,line_total,products(name)"
                )
                .eq("purchase_order_id", order_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_purchase_order_items_failed", order_id=order_id, error=str(e))
            raise DatabaseError("select", str(e))

        items = []
        for row in result.data:
            product = row.get("products") or {}
            items.append(PurchaseOrderItemResponse(
                product_id=row.get("product_id"),
                product_name=product.get("name") or "Unknown",
                quantity=row["quantity"],
                units_per_box=row.get("units_per_box") or 1,
                actual_quantity=row["actual_quantity"],
                unit_price=row.get("unit_price"),
                line_total=row.get("line_total")
            ))
        return items

    def get_detail(self, order_id: str) -> PurchaseOrderDetail:
        return PurchaseOrderDetail(
            order=self.get_by_id(order_id),
            items=self.get_items(order_id)
        )

    # ===================
    # WRITE OPERATIONS
    # ===================

    def save(
        self,
        state: ReconciliationState,
        supplier: Optional[str] = None,
        confirm_unmatched: bool = False
    ) -> PurchaseOrderDetail:
        """
        Persist a reconciled delivery note and book its stock.

        Args:
            state: Reconciliation state; only matched lines are stored
            supplier: Supplier name
            confirm_unmatched: User accepted that unmatched entries are dropped

        Returns:
            Stored order with its lines

        Raises:
            EmptyPurchaseOrderError: No matched lines (no store call made)
            UnmatchedItemsPendingError: Unmatched entries, not confirmed
            DatabaseError: Store failure
        """
        validate_for_save(state, confirm_unmatched)

        totals = calculate_totals(state)

        logger.info(
            "saving_purchase_order",
            lines=totals.line_count,
            skipped_unmatched=totals.unmatched_count,
            subtotal=str(totals.subtotal)
        )

        try:
            result = self.db.table(self.table).insert({
                "supplier": clean_supplier_name(supplier),
                "subtotal": float(round2(totals.subtotal)),
                "tax_amount": float(round2(totals.tax)),
                "total_amount": float(round2(totals.total_incl_tax)),
            }).execute()
        except Exception as e:
            logger.error("create_purchase_order_failed", error=str(e))
            raise DatabaseError("insert", str(e))

        order = PurchaseOrderResponse(**result.data[0])

        rows = [
            {
                "purchase_order_id": order.id,
                "product_id": item.product_id,
                "quantity": float(item.box_count),
                "units_per_box": item.units_per_box,
                "actual_quantity": float(item.total_units),
                "unit_price": float(item.unit_price),
                "line_total": float(item.line_total),
            }
            for item in state.matched
        ]

        try:
            self.db.table(self.items_table).insert(rows).execute()
        except Exception as e:
            logger.error("create_purchase_order_items_failed", order_id=order.id, error=str(e))
            # Header without lines would show up in reports; drop it
            self.db.table(self.table).delete().eq("id", order.id).execute()
            raise DatabaseError("insert", str(e), details={"purchase_order_id": order.id})

        product_service = get_product_service()
        for item in state.matched:
            product_service.adjust_stock(item.product_id, item.total_units)

        logger.info(
            "purchase_order_saved",
            order_id=order.id,
            lines=len(rows),
            total=str(order.total_amount)
        )

        items = [
            PurchaseOrderItemResponse(
                product_id=item.product_id,
                product_name=item.product_name,
                quantity=item.box_count,
                units_per_box=item.units_per_box,
                actual_quantity=item.total_units,
                unit_price=item.unit_price,
                line_total=item.line_total
            )
            for item in state.matched
        ]

        return PurchaseOrderDetail(order=order, items=items)

    def delete(self, order_id: str) -> bool:
        """
        Delete a purchase order and take its units back out of stock.

        Raises:
            PurchaseOrderNotFoundError: If the order doesn't exist
        """
        logger.info("deleting_purchase_order", order_id=order_id)

        self.get_by_id(order_id)

        try:
            result = (
                self.db.table(self.items_table)
                .select("product_id,actual_quantity")
                .eq("purchase_order_id", order_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_purchase_order_items_failed", order_id=order_id, error=str(e))
            raise DatabaseError("select", str(e))

        product_service = get_product_service()
        for row in result.data:
            product_service.adjust_stock(
                row["product_id"],
                -Decimal(str(row.get("actual_quantity") or 0))
            )

        try:
            self.db.table(self.table).delete().eq("id", order_id).execute()
        except Exception as e:
            logger.error("delete_purchase_order_failed", order_id=order_id, error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("purchase_order_deleted", order_id=order_id, lines=len(result.data))

        return True


# Singleton instance
_purchase_order_service: Optional[PurchaseOrderService] = None


def get_purchase_order_service() -> PurchaseOrderService:
    """Get or create PurchaseOrderService instance."""
    global _purchase_order_service
    if _purchase_order_service is None:
        _purchase_order_service = PurchaseOrderService()
    return _purchase_order_service
