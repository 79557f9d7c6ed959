"""
Database connection management.

Provides the Supabase client singleton for all table and RPC access.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class DatabaseConnectionError(Exception):
    """Failed to connect to database."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get cached Supabase client instance.

    Uses lru_cache to ensure only one client is created.
    Call get_supabase_client.cache_clear() to reconnect.

    Returns:
        Client: Supabase client

    Raises:
        DatabaseConnectionError: If the client cannot be created
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )

        logger.info("supabase_connected", status="success")

        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseConnectionError(f"Failed to connect to Supabase: {e}") from e


# ===================
# HELPER FUNCTIONS
# ===================

def check_connection() -> dict:
    """
    Check the store is reachable and the till can sell.

    Reads the active product count and how many of those have a
    current price (products_with_price view). Products without a
    price cannot be added to a cart.

    Returns:
        dict: status "healthy" with counts, or "unhealthy" with the error
    """
    try:
        client = get_supabase_client()

        products = (
            client.table("products")
            .select("id", count="exact")
            .eq("is_active", True)
            .execute()
        )
        priced = (
            client.table("products_with_price")
            .select("id,price")
            .execute()
        )

        priced_count = sum(1 for row in priced.data if row.get("price") is not None)

        return {
            "status": "healthy",
            "products_count": products.count,
            "priced_products_count": priced_count,
            "unpriced_products_count": max(0, (products.count or 0) - priced_count)
        }

    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        return {
            "status": "unhealthy",
            "error": str(e)
        }
