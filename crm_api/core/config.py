
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "CRM API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # Database (PostgreSQL via asyncpg or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./crm_dev.db",
        alias="DATABASE_URL",
    )
    create_tables_on_startup: bool = Field(
        default=True, alias="CREATE_TABLES_ON_STARTUP",
    )  # Alembic owns the schema everywhere except local dev

    # Multi-tenancy default
    default_client_id: str = Field(default="default", alias="DEFAULT_CLIENT_ID")

    # Tiering (sales bucket)
    tier_1_ad_spend_threshold: float = Field(
        default=5000.0, alias="TIER_1_AD_SPEND_THRESHOLD",
    )  # Weekly ad spend at or above this is Tier 1
    new_company_max_age_days: int = Field(
        default=60, alias="NEW_COMPANY_MAX_AGE_DAYS",
    )

    # Audit cadence (age based, independent of tier)
    weekly_audit_days: int = Field(default=7, alias="WEEKLY_AUDIT_DAYS")
    monthly_audit_days: int = Field(default=30, alias="MONTHLY_AUDIT_DAYS")
    quarterly_audit_days: int = Field(default=90, alias="QUARTERLY_AUDIT_DAYS")
    upcoming_audit_window_days: int = Field(
        default=7, alias="UPCOMING_AUDIT_WINDOW_DAYS",
    )
    upcoming_meeting_window_days: int = Field(
        default=7, alias="UPCOMING_MEETING_WINDOW_DAYS",
    )

    # Response cache
    cache_ttl_seconds: int = Field(default=300, alias="CACHE_TTL_SECONDS")
    cache_max_entries: int = Field(default=512, alias="CACHE_MAX_ENTRIES")

    # Background maintenance jobs
    background_jobs_enabled: bool = Field(
        default=True, alias="BACKGROUND_JOBS_ENABLED",
    )
    overdue_sweep_interval_seconds: int = Field(
        default=3600, alias="OVERDUE_SWEEP_INTERVAL_SECONDS",
    )
    tier_update_interval_seconds: int = Field(
        default=86400, alias="TIER_UPDATE_INTERVAL_SECONDS",
    )
    schedule_update_interval_seconds: int = Field(
        default=86400, alias="SCHEDULE_UPDATE_INTERVAL_SECONDS",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

settings = Settings()
