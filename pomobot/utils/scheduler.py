from __future__ import annotations

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from pomobot.services.pomodoro_registry import PomodoroRegistry

logger = logging.getLogger(__name__)


class AppScheduler:
    """Wrapper around APScheduler for the bot's housekeeping jobs."""

    def __init__(self, registry: PomodoroRegistry, idle_ttl_minutes: int):
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.registry = registry
        self.idle_ttl_minutes = idle_ttl_minutes

    def start(self) -> None:
        # Finished or long-paused sessions only hold the cycle ordinal; drop them after the TTL
        self.scheduler.add_job(
            self._reap_idle_sessions_job,
            IntervalTrigger(minutes=1),
            id="reap_idle_pomodoro_sessions",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("AppScheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

    async def _reap_idle_sessions_job(self) -> None:
        try:
            self.registry.reap_idle(self.idle_ttl_minutes * 60)
        except Exception as e:
            logger.error(f"Error in _reap_idle_sessions_job: {e}", exc_info=True)
