"""
Product service for catalog and stock operations.

Products are soft-deleted (is_active = false) so purchase orders and
receipts keep their references.
"""

from decimal import Decimal
from typing import Optional
import structlog

from config import get_supabase_client, settings
from models.product import (
    CatalogProduct,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    StockLevel,
    StockOverviewItem,
    StockOverviewResponse,
)
from exceptions import ProductNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


def classify_stock(stock: Optional[Decimal]) -> StockLevel:
    """
    Classify a stock quantity for the reorder overview.

    None or 0 counts as CRITICAL (out of stock).
    """
    if stock is None or stock == 0:
        return StockLevel.CRITICAL
    if stock < settings.stock_critical_threshold:
        return StockLevel.CRITICAL
    if stock < settings.stock_low_threshold:
        return StockLevel.LOW
    if stock < settings.stock_medium_threshold:
        return StockLevel.MEDIUM
    return StockLevel.GOOD


class ProductService:
    """
    Product business logic.

    Handles CRUD, catalog snapshots for matching and stock changes.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self, active_only: bool = True) -> list[ProductResponse]:
        """
        Get all products ordered by name.

        Args:
            active_only: Only return active products

        Returns:
            List of products
        """
        logger.info("getting_products", active_only=active_only)

        try:
            query = self.db.table(self.table).select("id,name,unit,is_active,stock_quantity")

            if active_only:
                query = query.eq("is_active", True)

            result = query.order("name").execute()

            products = [ProductResponse(**row) for row in result.data]

            logger.info("products_retrieved", count=len(products))

            return products

        except Exception as e:
            logger.error("get_products_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_catalog(self) -> list[CatalogProduct]:
        """Snapshot of active products for name matching."""
        return [p.to_catalog() for p in self.get_all(active_only=True)]

    def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a single product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("id,name,unit,is_active,stock_quantity")
                .eq("id", product_id)
                .single()
                .execute()
            )

            if not result.data:
                raise ProductNotFoundError(product_id)

            return ProductResponse(**result.data)

        except ProductNotFoundError:
            raise
        except Exception as e:
            logger.error("get_product_failed", product_id=product_id, error=str(e))
            # PostgREST reports .single() without rows as an error
            if "0 rows" in str(e) or "no rows" in str(e).lower():
                raise ProductNotFoundError(product_id)
            raise DatabaseError("select", str(e))

    def get_stock_overview(
        self,
        level: Optional[StockLevel] = None,
        search: Optional[str] = None
    ) -> StockOverviewResponse:
        """
        Stock levels of active products with their latest price.

        Args:
            level: Only include products at this level
            search: Case-insensitive name filter

        Returns:
            StockOverviewResponse with per-level counts (before filtering)
        """
        logger.info("getting_stock_overview", level=level, search=search)

        products = self.get_all(active_only=True)
        prices = self._latest_prices([p.id for p in products])

        items = [
            StockOverviewItem(
                id=p.id,
                name=p.name,
                unit=p.unit,
                stock_quantity=p.stock_quantity,
                price=prices.get(p.id),
                level=classify_stock(p.stock_quantity)
            )
            for p in products
        ]

        counts = {lvl: 0 for lvl in StockLevel}
        for item in items:
            counts[item.level] += 1

        if level:
            items = [i for i in items if i.level == level]
        if search:
            needle = search.lower()
            items = [i for i in items if needle in i.name.lower()]

        return StockOverviewResponse(
            data=items,
            total=len(items),
            critical_count=counts[StockLevel.CRITICAL],
            low_count=counts[StockLevel.LOW],
            medium_count=counts[StockLevel.MEDIUM],
            good_count=counts[StockLevel.GOOD]
        )

    def _latest_prices(self, product_ids: list[str]) -> dict[str, Decimal]:
        """Newest price per product from the price history."""
        if not product_ids:
            return {}

        try:
            result = (
                self.db.table("prices")
                .select("product_id,price")
                .in_("product_id", product_ids)
                .order("valid_from", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_latest_prices_failed", error=str(e))
            raise DatabaseError("select", str(e))

        latest: dict[str, Decimal] = {}
        for row in result.data:
            # Rows are newest first; keep the first seen
            if row["product_id"] not in latest:
                latest[row["product_id"]] = Decimal(str(row["price"]))
        return latest

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: ProductCreate) -> ProductResponse:
        """Create a new active product."""
        logger.info("creating_product", name=data.name)

        try:
            insert_data = {
                "name": data.name,
                "unit": data.unit.value,
                "stock_quantity": float(data.stock_quantity),
                "is_active": True
            }

            result = self.db.table(self.table).insert(insert_data).execute()

            product = ProductResponse(**result.data[0])

            logger.info("product_created", product_id=product.id, name=product.name)

            return product

        except Exception as e:
            logger.error("create_product_failed", name=data.name, error=str(e))
            raise DatabaseError("insert", str(e))

    def update(self, product_id: str, data: ProductUpdate) -> ProductResponse:
        """
        Update an existing product.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.info("updating_product", product_id=product_id)

        existing = self.get_by_id(product_id)

        update_data = {}
        if data.name is not None:
            update_data["name"] = data.name
        if data.unit is not None:
            update_data["unit"] = data.unit.value
        if data.is_active is not None:
            update_data["is_active"] = data.is_active
        if data.stock_quantity is not None:
            update_data["stock_quantity"] = float(data.stock_quantity)

        if not update_data:
            return existing

        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", product_id)
                .execute()
            )

            product = ProductResponse(**result.data[0])

            logger.info("product_updated", product_id=product_id, fields=list(update_data.keys()))

            return product

        except Exception as e:
            logger.error("update_product_failed", product_id=product_id, error=str(e))
            raise DatabaseError("update", str(e))

    def delete(self, product_id: str) -> bool:
        """Soft delete a product (is_active = false)."""
        logger.info("deleting_product", product_id=product_id)

        self.get_by_id(product_id)

        try:
            self.db.table(self.table).update(
                {"is_active": False}
            ).eq("id", product_id).execute()

            logger.info("product_deleted", product_id=product_id)

            return True

        except Exception as e:
            logger.error("delete_product_failed", product_id=product_id, error=str(e))
            raise DatabaseError("update", str(e))

    def adjust_stock(self, product_id: str, delta: Decimal) -> Optional[Decimal]:
        """
        Add delta (may be negative) to a product's stock.

        Read-then-write; the store is last-write-wins for concurrent tills.

        Returns:
            New stock, or None if the product no longer exists
        """
        try:
            result = (
                self.db.table(self.table)
                .select("stock_quantity")
                .eq("id", product_id)
                .execute()
            )

            if not result.data:
                logger.warning("stock_adjust_product_missing", product_id=product_id)
                return None

            current = Decimal(str(result.data[0].get("stock_quantity") or 0))
            new_stock = current + delta

            self.db.table(self.table).update(
                {"stock_quantity": float(new_stock)}
            ).eq("id", product_id).execute()

            logger.debug(
                "stock_adjusted",
                product_id=product_id,
                delta=str(delta),
                stock=str(new_stock)
            )

            return new_stock

        except Exception as e:
            logger.error("adjust_stock_failed", product_id=product_id, error=str(e))
            raise DatabaseError("update", str(e))


# Singleton instance for convenience
_product_service: Optional[ProductService] = None

def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
