"""
Health Check Endpoints
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backoffice.container import BackOffice
from backoffice.models import Resource
from backoffice.serving.dependencies import get_backoffice

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(backoffice: BackOffice = Depends(get_backoffice)) -> HealthResponse:
    """
    Checks:
    - Auth gate state
    - Reference cache entries
    - Persisted-state store connectivity
    """
    settings = backoffice.settings
    overall_status = "healthy"
    checks: Dict[str, Any] = {"auth": {"state": backoffice.gate.state.value}}

    cache_checks = {}
    for resource in Resource:
        entry = backoffice.cache.get_entry(resource)
        cache_checks[resource.value] = {
            "count": len(entry.data),
            "loading": entry.loading,
            "stale": backoffice.cache.is_stale(resource),
            "error": entry.error,
        }
        if entry.error is not None:
            overall_status = "degraded"
    checks["cache"] = cache_checks

    if backoffice.store is None:
        checks["store"] = {"status": "disabled"}
    else:
        try:
            await backoffice.store.redis.ping()
            checks["store"] = {"status": "healthy"}
        except Exception as e:
            checks["store"] = {"status": "unhealthy", "error": str(e)}
            overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 if the application is running."""
    return {"status": "alive"}
