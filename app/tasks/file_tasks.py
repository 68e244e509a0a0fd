"""Celery tasks for uploaded files."""

import asyncio
import logging
from dataclasses import asdict
from typing import Any

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Import all models to ensure they're registered before creating session
import models  # noqa: F401

from app.celery_app import celery_app
from app.core.config import settings
from app.database import enable_sqlite_foreign_keys
from app.services.file_cleanup_service import build_file_cleanup_service

logger = logging.getLogger(__name__)


@celery_app.task(name="app.tasks.file_tasks.remove_unused_files_task", bind=True)
def remove_unused_files_task(self) -> dict[str, Any]:
    """Delete uploads that were never attached to a post.

    Scheduled by Celery Beat when ``FILE_CLEANUP_SCHEDULER=celery``.

    Returns:
        Dictionary with the sweep counters
    """
    logger.info(f"🚀 Starting unused files cleanup (Task ID: {self.request.id})")

    try:
        result = asyncio.run(_remove_unused_files_async())
        logger.info(f"✅ Unused files cleanup completed: {result}")
        return result

    except Exception as e:
        logger.error(f"❌ Unused files cleanup failed: {str(e)}")
        raise self.retry(exc=e, countdown=60 * 5, max_retries=3)


async def _remove_unused_files_async() -> dict[str, Any]:
    # The engine is bound to the event loop of this run
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    enable_sqlite_foreign_keys(engine)
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    try:
        stats = await build_file_cleanup_service(session_factory).remove_unused_files()
        return asdict(stats)
    finally:
        await engine.dispose()
