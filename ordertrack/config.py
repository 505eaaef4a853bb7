"""
Service configuration.

Settings are read from the environment (populated from .env by python-dotenv
at application start) each time load_settings() is called.
"""

import os

from pydantic import BaseModel, Field

DEFAULT_TRACKING_API_URL = "https://apis.tracker.delivery/graphql"
DEFAULT_SYNC_CONCURRENCY = 3
DEFAULT_BATCH_QUERY_LIMIT = 100


class Settings(BaseModel):
    """Runtime settings for the API service."""

    # Database
    database_url: str | None = Field(
        default=None, description="SQLAlchemy URL (takes precedence over Cloud SQL)"
    )
    instance_connection_name: str | None = Field(
        default=None, description="Cloud SQL instance (project:region:instance)"
    )
    db_name: str = Field(default="ordertrack", description="Database name")
    db_user: str | None = Field(default=None, description="Database IAM user")

    # Upstream order API
    order_query_api_url: str | None = Field(
        default=None, description="Pending order query endpoint"
    )
    order_api_token: str | None = Field(default=None, description="Bearer token")
    order_api_timeout: float = Field(default=10.0, description="Seconds")

    # Tracking provider
    tracking_api_url: str = Field(default=DEFAULT_TRACKING_API_URL)
    tracking_api_key: str | None = Field(default=None)
    tracking_timeout: float = Field(default=15.0, description="Seconds")

    # Scheduled sync
    cron_secret: str | None = Field(
        default=None, description="Shared secret for the scheduled sync endpoint"
    )
    sync_concurrency: int = Field(default=DEFAULT_SYNC_CONCURRENCY, ge=1)
    batch_query_limit: int = Field(default=DEFAULT_BATCH_QUERY_LIMIT, ge=1)

    display_utc_offset: float = Field(
        default=8.0, description="Hours east of UTC for formatted display times"
    )

    log_level: str = Field(default="INFO")

    @property
    def database_configured(self) -> bool:
        return bool(self.database_url or self.instance_connection_name)


def load_settings() -> Settings:
    """Build Settings from environment variables."""
    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        instance_connection_name=os.getenv("INSTANCE_CONNECTION_NAME") or None,
        db_name=os.getenv("DB_NAME", "ordertrack"),
        db_user=os.getenv("DB_USER") or None,
        order_query_api_url=os.getenv("ORDER_QUERY_API_URL") or None,
        order_api_token=os.getenv("ORDER_API_TOKEN") or None,
        order_api_timeout=float(os.getenv("ORDER_API_TIMEOUT", "10")),
        tracking_api_url=os.getenv("TRACKING_API_URL", DEFAULT_TRACKING_API_URL),
        tracking_api_key=os.getenv("TRACKING_API_KEY") or None,
        tracking_timeout=float(os.getenv("TRACKING_TIMEOUT", "15")),
        cron_secret=os.getenv("CRON_SECRET") or None,
        sync_concurrency=int(
            os.getenv("SYNC_CONCURRENCY", str(DEFAULT_SYNC_CONCURRENCY))
        ),
        batch_query_limit=int(
            os.getenv("BATCH_QUERY_LIMIT", str(DEFAULT_BATCH_QUERY_LIMIT))
        ),
        display_utc_offset=float(os.getenv("DISPLAY_UTC_OFFSET", "8")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
