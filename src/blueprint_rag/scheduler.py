"""APScheduler-based scheduler for periodic persisted-store syncing.

Keeps `RetrievalService.last_sync` fresh and purges expired cache entries
while the MCP server is running.
"""
from __future__ import annotations

from datetime import timedelta
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from blueprint_rag.search.service import RetrievalService


class SyncScheduler:
    """Schedules periodic runs of `RetrievalService.sync_persisted` using AsyncIOScheduler."""

    def __init__(self, scheduler: Optional[AsyncIOScheduler] = None) -> None:
        self._scheduler = scheduler or AsyncIOScheduler()
        self._started = False

    @property
    def running(self) -> bool:
        return self._started

    def start(self) -> None:
        """Start the underlying scheduler if not already started."""
        if not self._started:
            self._scheduler.start(paused=False)
            self._started = True

    def shutdown(self, *, wait: bool = True) -> None:
        """Shut down the scheduler."""
        if self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False

    def schedule_sync(
        self,
        service: RetrievalService,
        *,
        interval: timedelta = timedelta(seconds=30),
        job_id: Optional[str] = "persisted-sync",
        replace_existing: bool = True,
    ) -> None:
        """Schedule periodic execution of `service.sync_persisted()`.

        Parameters
        ----------
        service: RetrievalService
            The service whose persisted store is checked.
        interval: timedelta
            How often to run the sync job (default 30 seconds).
        job_id: Optional[str]
            Explicit job id to allow replacing/canceling.
        replace_existing: bool
            If True, replace any existing job with the same id.
        """

        async def _job() -> None:
            await service.sync_persisted()

        trigger = IntervalTrigger(seconds=max(1, int(interval.total_seconds())))
        self._scheduler.add_job(
            _job,
            trigger=trigger,
            id=job_id,
            replace_existing=replace_existing,
            max_instances=1,
            coalesce=True,
        )
