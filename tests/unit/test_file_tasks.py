"""Unit tests for the Celery cleanup task."""

from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select

from app.celery_app import celery_app
from app.tasks.file_tasks import _remove_unused_files_async, remove_unused_files_task
from models import File
from models.base import utcnow
from tests.factories import create_file


class TestRemoveUnusedFilesTask:
    def test_task_is_scheduled_by_beat(self):
        entry = celery_app.conf.beat_schedule["remove-unused-files"]

        assert entry["task"] == remove_unused_files_task.name
        assert entry["schedule"] == timedelta(hours=24)
        assert entry["options"]["expires"] == 24 * 3600

    def test_returns_sweep_counters(self):
        counters = {"selected": 2, "deleted": 2, "failed": 0}

        with patch("app.tasks.file_tasks._remove_unused_files_async", AsyncMock(return_value=counters)):
            result = remove_unused_files_task.apply()

        assert result.successful()
        assert result.get() == counters

    def test_failure_is_retried(self):
        error = RuntimeError("database is unavailable")

        with patch("app.tasks.file_tasks._remove_unused_files_async", AsyncMock(side_effect=error)):
            with patch.object(remove_unused_files_task, "retry", return_value=error) as retry:
                result = remove_unused_files_task.apply()

        assert result.failed()
        retry.assert_called_once_with(exc=error, countdown=300, max_retries=3)

    @pytest.mark.asyncio
    async def test_sweeps_configured_database(self, test_engine, test_db):
        old = await create_file(test_db, upload_date=utcnow() - timedelta(hours=48))
        fresh = await create_file(test_db)
        database_url = test_engine.url.render_as_string(hide_password=False)

        with patch("app.tasks.file_tasks.settings.database_url", database_url):
            counters = await _remove_unused_files_async()

        assert counters == {"selected": 1, "deleted": 1, "failed": 0}
        result = await test_db.execute(select(File.id).where(File.id.in_([old.id, fresh.id])))
        assert result.scalars().all() == [fresh.id]
        count = await test_db.execute(select(func.count()).select_from(File))
        assert count.scalar() == 1
