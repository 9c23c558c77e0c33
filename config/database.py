"""
Supabase client access.

Services read and write through the anon-key client. The CSV importer prefers
the service-role client when one is configured so bulk inserts are not
blocked by row level security.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import time
import structlog

from config.settings import settings
from exceptions import ExternalServiceError

logger = structlog.get_logger(__name__)


def _connect(key: str, role: str) -> Client:
    logger.info(
        "connecting_to_supabase",
        role=role,
        url=settings.supabase_url[:30] + "..."
    )
    try:
        return create_client(settings.supabase_url, key)
    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            role=role,
            error=str(e),
            error_type=type(e).__name__
        )
        raise ExternalServiceError(
            service="supabase",
            message=f"Failed to connect to Supabase: {e}"
        ) from e


@lru_cache()
def get_supabase_client() -> Client:
    """
    Cached anon-key client. Call reset_connection() to rebuild it.

    Raises:
        ExternalServiceError: If the client cannot be created
    """
    return _connect(settings.supabase_key, role="anon")


@lru_cache()
def get_admin_client() -> Optional[Client]:
    """
    Cached service-role client, or None when SUPABASE_SERVICE_KEY is unset.

    Raises:
        ExternalServiceError: If the key is set but the client cannot be created
    """
    if not settings.supabase_service_key:
        logger.debug("service_role_client_not_configured")
        return None
    return _connect(settings.supabase_service_key, role="service")


class DatabaseSession:
    """
    Logs one database operation with its duration.

    Usage:
        with DatabaseSession("insert_leads", client) as db:
            db.table("leads").insert(rows).execute()
    """

    def __init__(self, operation_name: str, client: Optional[Client] = None):
        self.operation_name = operation_name
        self.client = client
        self._started = 0.0

    def __enter__(self) -> Client:
        if self.client is None:
            self.client = get_supabase_client()
        self._started = time.perf_counter()
        return self.client

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed_ms = round((time.perf_counter() - self._started) * 1000, 1)
        if exc_type:
            logger.warning(
                "db_operation_failed",
                operation=self.operation_name,
                elapsed_ms=elapsed_ms,
                error=str(exc_val),
                error_type=exc_type.__name__
            )
        else:
            logger.debug(
                "db_operation_complete",
                operation=self.operation_name,
                elapsed_ms=elapsed_ms
            )
        # Let the caller decide what a failure means
        return False


def check_connection() -> dict:
    """
    Count leads to prove the database answers.

    Returns:
        {"status": "healthy", "leads_count": n} or
        {"status": "unhealthy", "error": "..."}
    """
    try:
        result = (
            get_supabase_client()
            .table(settings.leads_table)
            .select("id", count="exact")
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}

    return {"status": "healthy", "leads_count": result.count}


def reset_connection() -> None:
    """Drop cached clients so the next call reconnects with current settings."""
    get_supabase_client.cache_clear()
    get_admin_client.cache_clear()
    logger.info("database_connection_reset")
