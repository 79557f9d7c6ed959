"""
Till (kassa) service.

Cart operations are pure: they take a Cart and return a new one. Only
checkout talks to the database, through the checkout_create remote
procedure which writes the receipt and its lines in one transaction.
"""

from decimal import Decimal
from typing import Optional
import structlog

from config import get_supabase_client
from models.checkout import Cart, CartItem, SaleType, CheckoutResponse
from models.product import ProductWithPrice, Unit
from exceptions import (
    DatabaseError,
    EmptyCartError,
    InvalidWeightError,
    PriceNotSetError,
)
from utils.money import parse_amount

logger = structlog.get_logger(__name__)


# ===================
# CART OPERATIONS
# ===================

def add_product(cart: Cart, product: ProductWithPrice, weight_kg=None) -> Cart:
    """
    Add a product to the cart.

    PIECE: bumps the quantity of an existing line with the same product
    and unit price, else adds a line of 1.
    WEIGHT_KG: always a new line; weight must be positive.

    Raises:
        PriceNotSetError: Product has no current price
        InvalidWeightError: Missing, non-numeric or non-positive weight
    """
    if product.price is None:
        raise PriceNotSetError(product.id, product.name)

    items = list(cart.items)

    if product.unit == Unit.PIECE:
        for idx, item in enumerate(items):
            if (
                item.product_id == product.id
                and item.unit == Unit.PIECE
                and item.unit_price == product.price
            ):
                items[idx] = item.model_copy(update={"quantity": (item.quantity or 0) + 1})
                return Cart(items=items)

        items.append(CartItem(
            product_id=product.id,
            name=product.name,
            unit=Unit.PIECE,
            unit_price=product.price,
            quantity=1
        ))
        return Cart(items=items)

    weight = parse_amount(weight_kg)
    if weight is None or weight <= 0:
        raise InvalidWeightError(weight_kg)

    items.append(CartItem(
        product_id=product.id,
        name=product.name,
        unit=Unit.WEIGHT_KG,
        unit_price=product.price,
        weight_kg=weight
    ))
    return Cart(items=items)


def update_quantity(cart: Cart, product_id: str, qty) -> Cart:
    """
    Set the quantity of a product's PIECE lines.

    Floored to a whole number, never below 0; lines at 0 are removed.
    """
    new_qty = max(0, int(Decimal(str(qty))))

    items = [
        item.model_copy(update={"quantity": new_qty})
        if item.product_id == product_id and item.unit == Unit.PIECE
        else item
        for item in cart.items
    ]

    return Cart(items=[
        i for i in items
        if not (i.unit == Unit.PIECE and (i.quantity or 0) <= 0)
    ])


def update_weight(cart: Cart, product_id: str, weight) -> Cart:
    """Set the weight of a product's KILO lines; lines at 0 are removed."""
    new_weight = parse_amount(weight)
    if new_weight is None or new_weight < 0:
        new_weight = Decimal("0")

    items = [
        item.model_copy(update={"weight_kg": new_weight})
        if item.product_id == product_id and item.unit == Unit.WEIGHT_KG
        else item
        for item in cart.items
    ]

    return Cart(items=[
        i for i in items
        if not (i.unit == Unit.WEIGHT_KG and (i.weight_kg or 0) <= 0)
    ])


def remove_item(cart: Cart, product_id: str) -> Cart:
    """Remove every line of a product."""
    return Cart(items=[i for i in cart.items if i.product_id != product_id])


# ===================
# CHECKOUT
# ===================

class CheckoutService:
    """Turns a cart into a stored receipt."""

    def __init__(self):
        self.db = get_supabase_client()

    def checkout(
        self,
        cart: Cart,
        note: Optional[str] = None,
        sale_type: SaleType = SaleType.SHOP
    ) -> CheckoutResponse:
        """
        Store the cart as a receipt.

        Raises:
            EmptyCartError: Nothing to check out (no store call made)
            DatabaseError: checkout_create failed
        """
        if not cart.items:
            raise EmptyCartError()

        payload = [
            {
                "product_id": item.product_id,
                "unit": item.unit.value,
                "quantity": item.quantity if item.unit == Unit.PIECE else None,
                "weight_kg": float(item.weight_kg) if item.unit == Unit.WEIGHT_KG else None,
                "unit_price": float(item.unit_price),
                "line_total": float(item.line_total),
            }
            for item in cart.items
        ]

        logger.info(
            "checkout_started",
            items=len(payload),
            total=str(cart.total),
            sale_type=sale_type.value
        )

        try:
            result = self.db.rpc("checkout_create", {
                "_items": payload,
                "_note": note or None,
                "_sale_type": sale_type.value
            }).execute()
        except Exception as e:
            logger.error("checkout_failed", error=str(e))
            raise DatabaseError("rpc checkout_create", str(e))

        receipt_id = str(result.data)

        logger.info("checkout_completed", receipt_id=receipt_id, total=str(cart.total))

        return CheckoutResponse(
            receipt_id=receipt_id,
            total=cart.total,
            item_count=len(cart.items)
        )


# Singleton instance
_checkout_service: Optional[CheckoutService] = None


def get_checkout_service() -> CheckoutService:
    """Get or create CheckoutService instance."""
    global _checkout_service
    if _checkout_service is None:
        _checkout_service = CheckoutService()
    return _checkout_service
