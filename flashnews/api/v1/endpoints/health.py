from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Connection

from ....config import get_settings
from ....core.database import ping
from ....core.pool import ConnectionPool
from ....utils.datetime_utils import utc_now
from ...dependencies import get_connection_pool

logger = structlog.get_logger(__name__)
settings = get_settings()

router = APIRouter()


@router.get("/health")
def health_check(pool: ConnectionPool[Connection] = Depends(get_connection_pool)) -> Dict[str, Any]:
    pool_status = pool.status()

    if not ping(pool):
        logger.error("Database health check failed", pool=pool_status)
        raise HTTPException(
            status_code=503,
            detail={
                "status": "unhealthy",
                "database": "unhealthy",
                "pool": pool_status,
                "timestamp": utc_now().isoformat()
            }
        )

    return {
        "status": "healthy",
        "service": "FlashNews API",
        "version": "0.1.0",
        "environment": "development" if settings.debug else "production",
        "database": "healthy",
        "pool": pool_status,
        "timestamp": utc_now().isoformat()
    }
