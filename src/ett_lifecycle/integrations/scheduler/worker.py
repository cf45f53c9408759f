"""arq worker running the timer callbacks.

Start with ``arq ett_lifecycle.integrations.scheduler.worker.WorkerSettings``.
Each job builds on the services created at worker startup.
"""

import logging
from typing import Any, Dict

from ...config.logging_config import setup_logging
from ...config.settings import get_settings
from .arq_scheduler import redis_settings

logger = logging.getLogger(__name__)


async def startup(ctx) -> None:
    from ...factory import create_services

    setup_logging()
    services = create_services(get_settings())
    await services.start()
    ctx["services"] = services
    logger.info("Lifecycle worker started")


async def shutdown(ctx) -> None:
    services = ctx.get("services")
    if services is not None:
        await services.stop()
    logger.info("Lifecycle worker stopped")


async def handle_stale_entity_vacancy(ctx, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Demolish the entity in the payload if its vacancy outlived the allowed limit."""
    entity_id = (payload or {}).get("entity_id")
    logger.info(f"Running stale entity vacancy check for {entity_id}")
    outcome = await ctx["services"].stale_vacancy.handle(entity_id)
    return {
        "entity_id": outcome.entity_id,
        "understaffed": outcome.understaffed,
        "demolished": outcome.demolished,
        "notified": outcome.notified,
    }


async def purge_stale_invitation(ctx, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Remove the invitation in the payload if it was never used to register."""
    payload = payload or {}
    code = payload.get("invitation_code")
    logger.info(f"Running stale invitation check for {code}")
    removed = await ctx["services"].stale_invitation.purge(code, payload.get("email"))
    return {"invitation_code": code, "removed": removed}


class WorkerSettings:
    functions = [handle_stale_entity_vacancy, purge_stale_invitation]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = redis_settings(get_settings())
    queue_name = get_settings().scheduler_queue_name
