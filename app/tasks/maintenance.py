"""Maintenance tasks run on the Celery beat schedule."""

import asyncio
import logging
import time
from typing import Any, Dict

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.celery_app import celery_app
from app.metrics.prometheus import track_celery_task
from app.services.notifications import NotificationService

logger = logging.getLogger(__name__)


async def purge_notifications(session_factory: async_sessionmaker) -> int:
    """Run the notification retention sweep in a session of its own."""
    async with session_factory() as session:
        return await NotificationService(session).cleanup_old_notifications()


async def _purge_with_fresh_engine() -> int:
    # each asyncio.run gets a new loop, so the pooled engine must not be shared across runs
    from app.db import build_engine

    engine = build_engine()
    try:
        return await purge_notifications(async_sessionmaker(engine, expire_on_commit=False))
    finally:
        await engine.dispose()


@celery_app.task(name="app.tasks.maintenance.cleanup_old_notifications")
def cleanup_old_notifications() -> Dict[str, Any]:
    """Delete read notifications past read retention and unread ones past unread retention."""
    start_time = time.time()
    logger.info("Starting notification cleanup")
    try:
        deleted = asyncio.run(_purge_with_fresh_engine())
    except Exception as exc:
        track_celery_task("cleanup_old_notifications", "error", time.time() - start_time)
        logger.error("Notification cleanup failed: %s", exc, exc_info=True)
        raise
    duration = time.time() - start_time
    track_celery_task("cleanup_old_notifications", "success", duration)
    logger.info("Notification cleanup deleted %s rows in %.2fs", deleted, duration)
    return {"status": "success", "deleted": deleted, "duration_seconds": duration}
