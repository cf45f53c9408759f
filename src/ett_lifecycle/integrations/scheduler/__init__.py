"""arq scheduler integration."""

from .arq_scheduler import ArqScheduler, redis_settings

__all__ = ["ArqScheduler", "redis_settings"]
