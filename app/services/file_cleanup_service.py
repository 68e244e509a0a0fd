"""Reclamation of uploaded files that were never attached to a post."""

import asyncio
import logging
from contextlib import suppress
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.domains.file.storage import UploadStorage
from models import File
from models.base import utcnow

logger = logging.getLogger(__name__)


@dataclass
class SweepStats:
    """Counters of one cleanup pass."""

    selected: int = 0
    deleted: int = 0
    failed: int = 0


class FileCleanupService:
    """
    Deletes files that are still unattached after ``max_age``.

    A file qualifies when ``post_id`` is empty and ``upload_date`` lies strictly
    before ``now() - max_age``. For each one the stored object is removed first
    and the row second; a failed disk removal keeps the row for the next pass.
    A stored object that is already missing counts as removed.

    Rows are read in batches ordered by id and each row is committed on its
    own, so a failure on one file leaves the others untouched.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        storage: UploadStorage,
        max_age: timedelta,
        batch_size: int = 500,
        now: Callable[[], datetime] = utcnow,
    ):
        self.session_factory = session_factory
        self.storage = storage
        self.max_age = max_age
        self.batch_size = batch_size
        self.now = now

    async def remove_unused_files(self) -> SweepStats:
        """Run one sweep and return its counters. Never raises on per-file errors."""
        cutoff = self.now() - self.max_age
        stats = SweepStats()
        last_id: UUID | None = None

        logger.info(f"🧹 Removing unattached files uploaded before {cutoff.isoformat()}")

        async with self.session_factory() as session:
            while True:
                try:
                    batch = await self._next_batch(session, cutoff, last_id)
                except SQLAlchemyError as e:
                    logger.error(f"❌ Could not query unused files: {str(e)}")
                    break

                if not batch:
                    break

                stats.selected += len(batch)
                for file_id, filename in batch:
                    if await self._remove_file(session, file_id, filename):
                        stats.deleted += 1
                    else:
                        stats.failed += 1

                last_id = batch[-1][0]
                if len(batch) < self.batch_size:
                    break

        logger.info(
            f"✅ File cleanup finished: {stats.selected} selected, "
            f"{stats.deleted} deleted, {stats.failed} failed"
        )
        return stats

    async def _next_batch(
        self, session: AsyncSession, cutoff: datetime, last_id: UUID | None
    ) -> list[tuple[UUID, str]]:
        query = (
            select(File.id, File.filename)
            .where(File.post_id.is_(None), File.upload_date < cutoff)
            .order_by(File.id)
            .limit(self.batch_size)
        )
        if last_id is not None:
            query = query.where(File.id > last_id)

        result = await session.execute(query)
        return [(row.id, row.filename) for row in result.all()]

    async def _remove_file(self, session: AsyncSession, file_id: UUID, filename: str) -> bool:
        try:
            removed = await self.storage.remove_post_file(filename)
        except OSError as e:
            logger.error(f"Failed to remove unused file {filename}: {str(e)}")
            return False

        if not removed:
            logger.warning(f"Unused file {filename} was missing on disk, removing its record")

        try:
            result = await session.execute(
                delete(File).where(File.id == file_id, File.post_id.is_(None))
            )
            await session.commit()
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Failed to delete record of unused file {filename}: {str(e)}")
            return False

        if result.rowcount == 0:
            logger.warning(f"File {filename} was attached to a post during cleanup, keeping its record")
            return False

        logger.debug(f"Removed unused file {filename}")
        return True


class FileCleanupScheduler:
    """
    Runs the cleanup periodically inside the API process.

    The loop sleeps ``interval`` after a pass finishes before starting the
    next one, so two passes never run at the same time. Unexpected errors of a
    pass are logged and the loop keeps going.
    """

    def __init__(
        self,
        cleanup_service: FileCleanupService,
        interval: timedelta,
        run_on_startup: bool = False,
    ):
        self.cleanup_service = cleanup_service
        self.interval = interval
        self.run_on_startup = run_on_startup
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="file-cleanup")
        logger.info(f"File cleanup scheduled every {self.interval}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("File cleanup scheduler stopped")

    async def run_once(self) -> SweepStats | None:
        try:
            return await self.cleanup_service.remove_unused_files()
        except Exception as e:
            logger.exception(f"❌ File cleanup pass failed: {str(e)}")
            return None

    async def _run(self) -> None:
        if self.run_on_startup:
            await self.run_once()
        while True:
            await asyncio.sleep(self.interval.total_seconds())
            await self.run_once()


def build_file_cleanup_service(
    session_factory: async_sessionmaker[AsyncSession], storage: UploadStorage | None = None
) -> FileCleanupService:
    """Create the cleanup service from the application settings."""
    return FileCleanupService(
        session_factory=session_factory,
        storage=storage or UploadStorage(settings.profile_path, settings.post_path),
        max_age=timedelta(hours=settings.unused_file_max_age_hours),
        batch_size=settings.file_cleanup_batch_size,
    )


def build_file_cleanup_scheduler(
    session_factory: async_sessionmaker[AsyncSession], storage: UploadStorage | None = None
) -> FileCleanupScheduler:
    return FileCleanupScheduler(
        build_file_cleanup_service(session_factory, storage),
        interval=timedelta(hours=settings.file_cleanup_interval_hours),
        run_on_startup=settings.file_cleanup_run_on_startup,
    )
