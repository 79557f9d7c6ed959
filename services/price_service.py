"""
Daily price service.

Prices are history rows; the current price of a product is the newest
one. Reads go through the products_with_price view, writes through the
set_price remote procedure so history stays append-only.
"""

from decimal import Decimal
from typing import Optional
import structlog

from config import get_supabase_client
from models.product import ProductWithPrice
from exceptions import DatabaseError, InvalidPriceError, ProductNotFoundError
from utils.money import parse_amount

logger = structlog.get_logger(__name__)


class PriceService:
    """Current prices and price changes."""

    def __init__(self):
        self.db = get_supabase_client()
        self.view = "products_with_price"

    def get_current_prices(self, search: Optional[str] = None) -> list[ProductWithPrice]:
        """
        Active products with their current price, ordered by name.

        Args:
            search: Case-insensitive name filter (till search box)
        """
        logger.info("getting_current_prices", search=search)

        try:
            result = (
                self.db.table(self.view)
                .select("id,name,unit,price")
                .order("name")
                .execute()
            )
        except Exception as e:
            logger.error("get_current_prices_failed", error=str(e))
            raise DatabaseError("select", str(e))

        products = [ProductWithPrice(**row) for row in result.data]

        if search:
            needle = search.lower()
            products = [p for p in products if needle in p.name.lower()]

        return products

    def get_current_price(self, product_id: str) -> ProductWithPrice:
        """
        One product with its current price.

        Raises:
            ProductNotFoundError: If the product is not in the view
        """
        try:
            result = (
                self.db.table(self.view)
                .select("id,name,unit,price")
                .eq("id", product_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_current_price_failed", product_id=product_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ProductNotFoundError(product_id)

        return ProductWithPrice(**result.data[0])

    def set_price(self, product_id: str, raw_price) -> Decimal:
        """
        Record a new daily price.

        Args:
            product_id: Product UUID
            raw_price: Amount, "1,25" style strings allowed

        Returns:
            The stored price

        Raises:
            InvalidPriceError: Not a number or negative (before any store call)
        """
        price = parse_amount(raw_price)
        if price is None or price < 0:
            raise InvalidPriceError(raw_price)

        logger.info("setting_price", product_id=product_id, price=str(price))

        try:
            self.db.rpc("set_price", {
                "_product_id": product_id,
                "_price": float(price)
            }).execute()
        except Exception as e:
            logger.error("set_price_failed", product_id=product_id, error=str(e))
            raise DatabaseError("rpc set_price", str(e))

        logger.info("price_set", product_id=product_id, price=str(price))

        return price


# Singleton instance
_price_service: Optional[PriceService] = None


def get_price_service() -> PriceService:
    """Get or create PriceService instance."""
    global _price_service
    if _price_service is None:
        _price_service = PriceService()
    return _price_service
