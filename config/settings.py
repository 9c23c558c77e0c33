"""
CRM settings, read from the environment or a .env file.

SUPABASE_URL and SUPABASE_KEY are required; everything else has a default.
Import tuning lives here too so batch size and pacing can change per
deployment.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Environment-backed settings. Names match env vars, case-insensitive."""

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
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
        description="Service role key; lets the CSV importer bypass row level security"
    )

    # ===================
    # TABLES
    # ===================
    leads_table: str = Field(
        default="leads",
        description="Table holding leads"
    )
    activities_table: str = Field(
        default="activities",
        description="Table holding lead activity log"
    )
    jobs_table: str = Field(
        default="jobs",
        description="Table holding scheduled/completed cleaning jobs"
    )

    # ===================
    # CSV IMPORT
    # ===================
    import_batch_size: int = Field(
        default=50,
        ge=1,
        le=1000,
        description="Rows per bulk insert call"
    )
    import_batch_delay_ms: int = Field(
        default=50,
        ge=0,
        le=5000,
        description="Pause between batches (milliseconds)"
    )
    import_preview_rows: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Rows parsed for the mapping preview"
    )
    import_session_ttl_minutes: int = Field(
        default=30,
        ge=1,
        le=1440,
        description="Minutes an idle import session is kept in memory"
    )
    import_max_file_mb: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Maximum accepted CSV upload size in MB"
    )
    import_enforce_required_fields: bool = Field(
        default=True,
        description="Reject imports that leave a required field unmapped"
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
        description="Expose /docs and error details"
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
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Origins allowed by the CORS middleware"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def import_batch_delay_seconds(self) -> float:
        """Batch pause converted for time.sleep()."""
        return self.import_batch_delay_ms / 1000

    @property
    def import_max_file_bytes(self) -> int:
        return self.import_max_file_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Settings loaded once per process; get_settings.cache_clear() reloads.

    Raises:
        pydantic.ValidationError: Required variable missing or out of range
    """
    return Settings()


# Module-level instance for `from config import settings`
settings = get_settings()
