"""Health & Readiness Checks — liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the database backend fails its check (readiness)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from chainlab.api.dependencies import get_database
from chainlab.services.database_service import DatabaseService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {"status": "healthy", "service": "chainlab-api", "version": "1.0.0"}


@router.get("/ready")
async def readiness_check(database: DatabaseService = Depends(get_database)):
    """Readiness check, including the database backend."""
    try:
        db_ok = await database.health_check()
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        db_ok = False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy", "backend": database.backend.value},
    }
