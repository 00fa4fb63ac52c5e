"""
Health check service - dependency checks for the readiness probe.

Liveness only says the process answers; readiness also checks the database,
since without it no delivery can be deduplicated.
"""
from typing import Any

from sqlalchemy import text

from hydianflow.core.logging import get_logger
from hydianflow.db.database import AsyncSessionLocal

logger = get_logger(__name__)

_STATUS_HEALTHY = "healthy"
_STATUS_DEGRADED = "degraded"

_CHECK_OK = "ok"

# Infrastructure details stay in the logs, not in the response
_ERROR_DB = "error: db_unavailable"


async def _check_db() -> str:
    """Cheap round-trip to the database."""
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
        return _CHECK_OK
    except Exception as e:
        logger.warning("Database health check failed", extra_data={"error": str(e)})
        return _ERROR_DB


async def check_readiness() -> dict[str, Any]:
    """Run every dependency check and summarize."""
    checks = {"db": await _check_db()}
    healthy = all(value == _CHECK_OK for value in checks.values())
    return {"status": _STATUS_HEALTHY if healthy else _STATUS_DEGRADED, **checks}
