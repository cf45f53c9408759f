"""Tests for timers on the arq queue."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from arq.connections import RedisSettings

from ett_lifecycle.core.exceptions import SchedulerError
from ett_lifecycle.integrations.scheduler import ArqScheduler, redis_settings


class TestArqScheduler:
    def test_redis_settings(self, settings):
        result = redis_settings(settings)
        assert result.host == settings.redis_host
        assert result.port == settings.redis_port

    @pytest.mark.asyncio
    async def test_arm_enqueues_deferred_job(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(side_effect=lambda target, payload, _job_id, **kwargs: MagicMock(job_id=_job_id))
        scheduler = ArqScheduler(RedisSettings(), "ett:delayed", pool=pool)

        job_id = await scheduler.arm(30, "purge_stale_invitation", {"invitation_code": "abc"}, "Remove stale invitation")

        assert job_id.startswith("purge_stale_invitation:")
        args, kwargs = pool.enqueue_job.call_args
        assert args == ("purge_stale_invitation", {"invitation_code": "abc"})
        assert kwargs["_defer_by"] == timedelta(seconds=30)
        assert kwargs["_queue_name"] == "ett:delayed"

    @pytest.mark.asyncio
    async def test_negative_delay_runs_immediately(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(return_value=MagicMock(job_id="j"))
        await ArqScheduler(RedisSettings(), pool=pool).arm(-5, "purge_stale_invitation", {}, "t")
        assert pool.enqueue_job.call_args.kwargs["_defer_by"] == timedelta(0)

    @pytest.mark.asyncio
    async def test_duplicate_job_raises(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(return_value=None)
        with pytest.raises(SchedulerError):
            await ArqScheduler(RedisSettings(), pool=pool).arm(1, "purge_stale_invitation", {}, "t")

    @pytest.mark.asyncio
    async def test_redis_failure_raises(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(side_effect=ConnectionError("refused"))
        with pytest.raises(SchedulerError):
            await ArqScheduler(RedisSettings(), pool=pool).arm(1, "purge_stale_invitation", {}, "t")

    @pytest.mark.asyncio
    async def test_close(self):
        pool = MagicMock()
        pool.close = AsyncMock()
        scheduler = ArqScheduler(RedisSettings(), pool=pool)
        await scheduler.close()
        pool.close.assert_awaited_once()
