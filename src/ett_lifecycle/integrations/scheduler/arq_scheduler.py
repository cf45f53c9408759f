"""One-shot delayed callbacks on an arq queue.

A timer is a deferred arq job whose function is the handler name and whose only
argument is the payload dict. arq has no cancel for deferred jobs, which
matches the scheduler contract.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional
from uuid import uuid4

from arq.connections import ArqRedis, RedisSettings, create_pool

from ...config.settings import EttSettings
from ...core.exceptions import SchedulerError

logger = logging.getLogger(__name__)


def redis_settings(settings: EttSettings) -> RedisSettings:
    return RedisSettings(
        host=settings.redis_host,
        port=settings.redis_port,
        database=settings.redis_database,
        password=settings.redis_password.get_secret_value() if settings.redis_password else None,
    )


class ArqScheduler:
    """
    Scheduler enqueueing deferred jobs through arq.

    Usage:
        scheduler = ArqScheduler(redis_settings(settings), settings.scheduler_queue_name)
        await scheduler.arm(3600, "purge_stale_invitation", {...}, "Remove stale invitation: abc")
        await scheduler.close()
    """

    def __init__(self, settings: RedisSettings, queue_name: Optional[str] = None, pool: Optional[ArqRedis] = None):
        self.redis_settings = settings
        self.queue_name = queue_name
        self._pool = pool

    @classmethod
    def from_settings(cls, settings: EttSettings) -> "ArqScheduler":
        return cls(redis_settings(settings), settings.scheduler_queue_name)

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._pool is None:
            self._pool = await create_pool(self.redis_settings, default_queue_name=self.queue_name)

    async def close(self) -> None:
        """Close Redis connection."""
        if self._pool:
            await self._pool.close()
            self._pool = None

    async def _ensure_connected(self) -> ArqRedis:
        if self._pool is None:
            await self.connect()
        return self._pool

    async def arm(
        self,
        delay_seconds: int,
        target: str,
        payload: Dict[str, Any],
        name: str,
        description: Optional[str] = None,
    ) -> str:
        """Enqueue target(payload) to run after delay_seconds, returning the job id."""
        job_id = f"{target}:{uuid4().hex}"
        try:
            pool = await self._ensure_connected()
            job = await pool.enqueue_job(
                target,
                payload,
                _job_id=job_id,
                _defer_by=timedelta(seconds=max(int(delay_seconds), 0)),
                _queue_name=self.queue_name,
            )
        except Exception as e:
            logger.error(f"Failed to arm timer '{name}': {e}")
            raise SchedulerError(f"Cannot arm timer '{name}': {e}") from e
        if job is None:
            raise SchedulerError(f"Timer '{name}' was not enqueued, job {job_id} already exists")

        logger.info(f"Armed timer '{name}' as job {job.job_id} in {delay_seconds} seconds")
        if description:
            logger.debug(f"{name}: {description}")
        return job.job_id
