"""APScheduler setup and job registration."""

from __future__ import annotations

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from circle.config import settings
from circle.jobs.challenge_status_sync import challenge_status_sync

scheduler = AsyncIOScheduler(timezone=settings.timezone)


def register_jobs() -> None:
    """Register all periodic jobs if not already present."""
    if scheduler.get_job("challenge_status_sync") is None:
        scheduler.add_job(
            challenge_status_sync,
            IntervalTrigger(
                minutes=max(1, settings.challenge_status_sync_minutes),
                timezone=settings.timezone,
            ),
            id="challenge_status_sync",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
