"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
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
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # REMOTE CATALOG (VTEX)
    # ===================
    vtex_account_name: Optional[str] = Field(
        None,
        description="VTEX account name (first part of the store host)"
    )
    vtex_environment: str = Field(
        default="vtexcommercestable",
        description="VTEX environment (second part of the store host)"
    )
    vtex_app_key: Optional[str] = Field(
        None,
        description="X-VTEX-API-AppKey header value"
    )
    vtex_app_token: Optional[str] = Field(
        None,
        description="X-VTEX-API-AppToken header value"
    )
    catalog_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Timeout for a single catalog request"
    )
    image_file_location_prefix: Optional[str] = Field(
        None,
        description="Prefix prepended to image FileLocation before persisting"
    )

    # ===================
    # STORE ADMISSION CONTROL
    # ===================
    store_max_concurrent_reads: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Maximum in-flight store reads system-wide"
    )
    store_gate_writes: bool = Field(
        default=False,
        description="Also route store writes through the admission controller"
    )

    # ===================
    # RETRY POLICY
    # ===================
    catalog_retry_max_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Attempts per catalog call (1 = no retry)"
    )
    catalog_retry_backoff_seconds: float = Field(
        default=0.5,
        ge=0,
        le=60,
        description="Sleep before the first retry"
    )
    catalog_retry_backoff_multiplier: float = Field(
        default=2.0,
        ge=1,
        le=10,
        description="Backoff growth factor between retries"
    )

    # ===================
    # FAST BATCH IMPORT
    # ===================
    fast_import_batch_size: int = Field(
        default=10,
        ge=1,
        le=10,
        description="References per group in the fast batch importer"
    )
    fast_import_item_pause_seconds: float = Field(
        default=0.005,
        ge=0,
        le=10,
        description="Pause between references inside a group"
    )
    fast_import_group_pause_seconds: float = Field(
        default=0.05,
        ge=0,
        le=60,
        description="Pause between groups"
    )
    default_warehouse_filter: Optional[str] = Field(
        None,
        description="Warehouse id or name to keep when importing stock"
    )

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
    def catalog_configured(self) -> bool:
        """Check if VTEX credentials are all present."""
        return bool(
            self.vtex_account_name
            and self.vtex_environment
            and self.vtex_app_key
            and self.vtex_app_token
        )

    @property
    def catalog_base_url(self) -> str:
        """Store host for the catalog API."""
        return f"https://{self.vtex_account_name}.{self.vtex_environment}.com.br"


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
