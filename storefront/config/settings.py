"""
Application configuration settings.
Handles environment variables and application-wide settings.
"""
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # Application settings
    app_name: str = Field(default="Homeopathy Store API", validation_alias="APP_NAME")
    app_version: str = Field(default="1.0.0", validation_alias="APP_VERSION")
    app_description: str = Field(
        default="Storefront and back-office API for a homeopathic pharmacy",
        validation_alias="APP_DESCRIPTION"
    )
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # Server settings
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")
    reload: bool = Field(default=True, validation_alias="RELOAD")

    # Database settings
    mongodb_url: str = Field(default="mongodb://localhost:27017", validation_alias="MONGODB_URL")
    database_name: str = Field(default="homeo_store", validation_alias="DATABASE_NAME")

    # MongoDB connection settings
    server_selection_timeout_ms: int = Field(default=30000, validation_alias="MONGODB_SERVER_SELECTION_TIMEOUT_MS")
    connect_timeout_ms: int = Field(default=30000, validation_alias="MONGODB_CONNECT_TIMEOUT_MS")
    socket_timeout_ms: int = Field(default=30000, validation_alias="MONGODB_SOCKET_TIMEOUT_MS")
    max_pool_size: int = Field(default=10, validation_alias="MONGODB_MAX_POOL_SIZE")
    min_pool_size: int = Field(default=1, validation_alias="MONGODB_MIN_POOL_SIZE")
    retry_writes: bool = Field(default=True, validation_alias="MONGODB_RETRY_WRITES")
    direct_connection: bool = Field(default=False, validation_alias="MONGODB_DIRECT_CONNECTION")

    # Logging settings
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # API settings
    api_prefix: str = Field(default="", validation_alias="API_PREFIX")

    # Pagination defaults
    default_page_size: int = Field(default=10, validation_alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, validation_alias="MAX_PAGE_SIZE")

    # Business logic settings
    max_order_items: int = Field(default=50, validation_alias="MAX_ORDER_ITEMS")
    max_item_quantity: int = Field(default=100, validation_alias="MAX_ITEM_QUANTITY")
    default_min_stock: int = Field(default=10, validation_alias="DEFAULT_MIN_STOCK")
    shipping_fee: float = Field(default=50.0, validation_alias="SHIPPING_FEE")
    free_shipping_threshold: float = Field(default=999.0, validation_alias="FREE_SHIPPING_THRESHOLD")
    currency: str = Field(default="inr", validation_alias="CURRENCY")

    # Scheduled price job
    price_scheduler_enabled: bool = Field(default=True, validation_alias="PRICE_SCHEDULER_ENABLED")
    price_scheduler_interval_seconds: int = Field(default=3600, validation_alias="PRICE_SCHEDULER_INTERVAL_SECONDS")

    # Third-party integrations
    stripe_secret_key: Optional[str] = Field(default=None, validation_alias="STRIPE_SECRET_KEY")
    pincode_api_url: str = Field(
        default="https://api.postalpincode.in/pincode",
        validation_alias="PINCODE_API_URL"
    )
    http_timeout_seconds: float = Field(default=10.0, validation_alias="HTTP_TIMEOUT_SECONDS")


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
