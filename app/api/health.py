from fastapi import APIRouter, Depends, HTTPException
from app.core.config import settings
from app.db import get_db
from app.metrics.prometheus import metrics_endpoint
from typing import Dict, Any
from datetime import datetime, timezone
import logging

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

log = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

async def database_alive(db: AsyncSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        log.error("Database health check failed: %s", exc)
        return False

async def redis_alive(timeout: float = 2.0) -> bool:
    client = aioredis.from_url(settings.REDIS_URL, socket_timeout=timeout, socket_connect_timeout=timeout)
    try:
        return bool(await client.ping())
    except (RedisError, OSError) as exc:
        log.warning("Redis health check failed: %s", exc)
        return False
    finally:
        await client.aclose()

@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """
    Health check endpoint to verify the API is running.

    Returns information about the API status and connected services.
    """
    health_data = {
        "status": "ok",
        "api": "running",
        "version": "0.1.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {}
    }

    db_ok = await database_alive(db)
    health_data["services"]["database"] = {"status": "ok" if db_ok else "error"}

    # Redis is only the Celery broker; the API keeps serving without it
    if settings.redis_health_check:
        redis_ok = await redis_alive()
        health_data["services"]["redis"] = {"status": "ok" if redis_ok else "error"}

    for service_name, service_info in health_data["services"].items():
        if service_info.get("status") != "ok":
            health_data["status"] = "degraded"
            break

    return health_data

@router.get("/health/live")
async def liveness_check():
    """Simple endpoint to check if the API is alive."""
    return {"status": "alive"}

@router.get("/health/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness check: the database must answer before traffic is sent here.
    """
    if not await database_alive(db):
        raise HTTPException(503, "Database unreachable")
    return {"status": "ready", "checks": {"database": "ok"}}

router.add_api_route("/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False)
