"""Health check endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from typing import Dict

from ..models import HealthStatus
from ..dependencies import get_backup_manager, get_redis
from erp_backup.backup import BackupManager

router = APIRouter(prefix="/health", tags=["health"])


async def check_store(backup_manager: BackupManager) -> bool:
    """Check document store connectivity."""
    try:
        return await backup_manager.store.check_health()
    except Exception:
        return False


async def check_redis(redis_client) -> bool:
    """Check job-tracking Redis connectivity."""
    if redis_client is None:
        return True  # Job tracking disabled
    try:
        return bool(await redis_client.ping())
    except Exception:
        return False


@router.get("", response_model=HealthStatus)
async def health_check(
    backup_manager: BackupManager = Depends(get_backup_manager),
    redis_client=Depends(get_redis),
) -> HealthStatus:
    """Health of the document store and job tracking."""
    store_ok = await check_store(backup_manager)
    redis_ok = await check_redis(redis_client)

    if store_ok and redis_ok:
        status = "healthy"
    elif not store_ok and not redis_ok:
        status = "unhealthy"
    else:
        status = "degraded"

    return HealthStatus(status=status, store=store_ok, redis=redis_ok)


@router.get("/ready")
async def readiness_probe(
    backup_manager: BackupManager = Depends(get_backup_manager),
) -> Dict[str, str]:
    """Kubernetes readiness probe."""
    if not await check_store(backup_manager):
        raise HTTPException(status_code=503, detail="Service not ready")
    return {"status": "ready"}


@router.get("/live")
async def liveness_probe() -> Dict[str, str]:
    """Kubernetes liveness probe."""
    return {"status": "alive"}
