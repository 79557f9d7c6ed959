"""
Product schemas for validation and serialization.
"""

from pydantic import Field, field_validator
from typing import Optional, Union
from decimal import Decimal
from enum import Enum

from models.base import BaseSchema, FrozenSchema


class Unit(str, Enum):
    """How a product is sold. Stored values are the shop's own codes."""
    PIECE = "STUK"
    WEIGHT_KG = "KILO"


class StockLevel(str, Enum):
    """Stock classification for the reorder overview."""
    CRITICAL = "critical"
    LOW = "low"
    MEDIUM = "medium"
    GOOD = "good"


class CatalogProduct(FrozenSchema):
    """
    Read-only catalog snapshot used for matching.

    Loaded from the products table; never written back by matching code.
    """

    id: str = Field(..., description="Product UUID")
    name: str = Field(..., description="Display name")
    unit: Unit = Field(Unit.PIECE, description="Sold per piece or per kg")
    stock_quantity: Optional[Decimal] = Field(None, description="Units currently in stock")


class ProductCreate(BaseSchema):
    """
    Create a new product.

    Required: name
    Optional: unit (defaults to PIECE), stock_quantity
    """

    name: str = Field(
        ...,
        min_length=1,
        max_length=120,
        description="Product name",
        examples=["Bio Bananen", "Tomaten los"]
    )
    unit: Unit = Field(Unit.PIECE, description="Sold per piece or per kg")
    stock_quantity: Decimal = Field(Decimal("0"), ge=0, description="Initial stock")


class ProductUpdate(BaseSchema):
    """
    Update existing product.

    All fields optional - only provided fields are updated.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    unit: Optional[Unit] = None
    is_active: Optional[bool] = None
    stock_quantity: Optional[Decimal] = Field(None, ge=0)


class ProductResponse(BaseSchema):
    """Product row as stored."""

    id: str = Field(..., description="Product UUID")
    name: str
    unit: Unit
    is_active: bool = True
    stock_quantity: Optional[Decimal] = None

    @field_validator("stock_quantity", mode="before")
    @classmethod
    def ensure_decimal(cls, v):
        """Stock comes back from PostgREST as float or int."""
        if v is not None:
            return Decimal(str(v))
        return v

    def to_catalog(self) -> CatalogProduct:
        """Snapshot for the matcher."""
        return CatalogProduct(
            id=self.id,
            name=self.name,
            unit=self.unit,
            stock_quantity=self.stock_quantity
        )


class ProductWithPrice(BaseSchema):
    """Product joined with its current daily price."""

    id: str
    name: str
    unit: Unit
    price: Optional[Decimal] = Field(None, description="Current price, None if never set")

    @field_validator("price", mode="before")
    @classmethod
    def ensure_decimal(cls, v):
        if v is not None:
            return Decimal(str(v))
        return v


class PriceUpdate(BaseSchema):
    """New daily price. Accepts "1,25" as well as 1.25."""

    price: Union[str, Decimal, float, int] = Field(..., description="New price in EUR")


class StockOverviewItem(BaseSchema):
    """Stock level of one product for the reorder page."""

    id: str
    name: str
    unit: Unit
    stock_quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    level: StockLevel


class StockOverviewResponse(BaseSchema):
    """Reorder overview with counts per level."""

    data: list[StockOverviewItem]
    total: int
    critical_count: int = 0
    low_count: int = 0
    medium_count: int = 0
    good_count: int = 0
