"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from decimal import Decimal
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )

    # ===================
    # RECEIPT SCANNER
    # ===================
    anthropic_api_key: Optional[str] = Field(
        None,
        description="Anthropic API key for delivery note scanning"
    )
    scanner_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model used for vision parsing"
    )
    scanner_max_tokens: int = Field(
        default=2048,
        ge=256,
        le=8192,
        description="Maximum tokens in scanner response"
    )

    # ===================
    # PURCHASE ORDERS
    # ===================
    purchase_vat_rate: Decimal = Field(
        default=Decimal("0.09"),
        ge=0,
        le=1,
        description="VAT rate applied to purchase order subtotals (9% = 0.09)"
    )

    # ===================
    # STOCK THRESHOLDS
    # ===================
    stock_critical_threshold: int = Field(
        default=5,
        ge=0,
        description="Stock below this is CRITICAL"
    )
    stock_low_threshold: int = Field(
        default=15,
        ge=0,
        description="Stock below this is LOW"
    )
    stock_medium_threshold: int = Field(
        default=30,
        ge=0,
        description="Stock below this is MEDIUM"
    )

    # ===================
    # FIXED COSTS (monthly, EUR)
    # ===================
    fixed_cost_rent: Decimal = Field(default=Decimal("1200"), ge=0, description="Rent")
    fixed_cost_car: Decimal = Field(default=Decimal("450"), ge=0, description="Car / transport")
    fixed_cost_staff: Decimal = Field(default=Decimal("2500"), ge=0, description="Staff")
    fixed_cost_other: Decimal = Field(default=Decimal("300"), ge=0, description="Other costs")

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def scanner_configured(self) -> bool:
        """Check if the receipt scanner has an API key."""
        return bool(self.anthropic_api_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
