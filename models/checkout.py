"""
Till (checkout) schemas.

The cart lives on the client; operations take a cart and return a new one.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from pydantic import Field, computed_field

from models.base import BaseSchema, FrozenSchema
from models.product import Unit
from utils.money import round2


class SaleType(str, Enum):
    """Sales channel. Stored values are the shop's own codes."""
    SHOP = "WINKEL"
    ORDER = "BESTELLING"
    BUSINESS = "BEDRIJF"

    @classmethod
    def from_stored(cls, value: Optional[str]) -> "SaleType":
        """Missing or unknown stored codes count as shop sales."""
        try:
            return cls(value)
        except ValueError:
            return cls.SHOP


class CartItem(FrozenSchema):
    """
    One till line.

    PIECE lines carry quantity, WEIGHT_KG lines carry weight_kg.
    """

    product_id: str
    name: str
    unit: Unit
    unit_price: Decimal = Field(..., ge=0)
    quantity: Optional[int] = Field(None, ge=0)
    weight_kg: Optional[Decimal] = Field(None, ge=0)

    @computed_field
    @property
    def line_total(self) -> Decimal:
        amount = self.quantity if self.unit == Unit.PIECE else self.weight_kg
        return round2((amount or 0) * self.unit_price)


class Cart(FrozenSchema):
    items: list[CartItem] = Field(default_factory=list)

    @computed_field
    @property
    def total(self) -> Decimal:
        return round2(sum((i.line_total for i in self.items), Decimal("0")))


# ===================
# REQUEST BODIES
# ===================

class AddToCartRequest(BaseSchema):
    cart: Cart = Field(default_factory=Cart)
    product_id: str
    weight_kg: Optional[Union[str, Decimal]] = Field(
        None,
        description="Required for KILO products; accepts \"0,75\""
    )


class UpdateCartLineRequest(BaseSchema):
    cart: Cart
    product_id: str
    value: Decimal


class RemoveCartLineRequest(BaseSchema):
    cart: Cart
    product_id: str


class CheckoutRequest(BaseSchema):
    cart: Cart
    note: Optional[str] = Field(None, max_length=500)
    sale_type: SaleType = SaleType.SHOP


class CheckoutResponse(BaseSchema):
    receipt_id: str
    total: Decimal
    item_count: int
