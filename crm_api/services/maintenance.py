"""Periodic maintenance jobs run inside the API process.

Jobs:
  tier_update       : TierService.update_all_tiers
  schedule_update   : AuditSchedulerService.update_all_schedules
  overdue_sweep     : AuditSchedulerService.process_overdue_audits

Each run gets its own session and commits on success. A failed run is logged
with its traceback and rolled back; the job then waits for its next interval.
All jobs are idempotent, so a missed or repeated run is harmless. A successful
run drops the cached API reads it may have made stale.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from crm_api.core.cache import ResponseCache
from crm_api.core.clock import Clock, utcnow
from crm_api.core.config import settings
from crm_api.services.audit_scheduler import AuditSchedulerService
from crm_api.services.tier import TierService

logger = logging.getLogger(__name__)

JobFn = Callable[[AsyncSession, str, Clock], Awaitable[Any]]


async def _tier_update(session: AsyncSession, client_id: str, clock: Clock):
    return await TierService(session, client_id, clock).update_all_tiers()


async def _schedule_update(session: AsyncSession, client_id: str, clock: Clock):
    return await AuditSchedulerService(session, client_id, clock).update_all_schedules()


async def _overdue_sweep(session: AsyncSession, client_id: str, clock: Clock):
    return await AuditSchedulerService(session, client_id, clock).process_overdue_audits()


@dataclass(frozen=True)
class Job:
    name: str
    interval_seconds: int
    fn: JobFn
    stale_resources: tuple[str, ...] = ()


def default_jobs() -> list[Job]:
    return [
        Job(
            "tier_update", settings.tier_update_interval_seconds, _tier_update,
            stale_resources=("tiers", "companies"),
        ),
        Job(
            "schedule_update", settings.schedule_update_interval_seconds, _schedule_update,
            stale_resources=("audits",),
        ),
        Job(
            "overdue_sweep", settings.overdue_sweep_interval_seconds, _overdue_sweep,
            stale_resources=("audits",),
        ),
    ]


class MaintenanceScheduler:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        client_id: str,
        jobs: list[Job] | None = None,
        clock: Clock = utcnow,
        cache: ResponseCache | None = None,
    ):
        self._session_factory = session_factory
        self._cache = cache
        self._client_id = client_id
        self._jobs = {job.name: job for job in (jobs if jobs is not None else default_jobs())}
        self._clock = clock
        self._tasks: dict[str, asyncio.Task] = {}

    @property
    def running(self) -> bool:
        return any(not t.done() for t in self._tasks.values())

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs)

    async def run_job_once(self, name: str) -> Any:
        """Run one job now in a fresh session. Errors propagate to the caller."""
        job = self._jobs[name]
        async with self._session_factory() as session:
            try:
                result = await job.fn(session, self._client_id, self._clock)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        if self._cache is not None:
            self._cache.invalidate_resources(job.stale_resources)
        logger.info("Job %s finished: %s", name, result)
        return result

    async def _loop(self, job: Job) -> None:
        while True:
            await asyncio.sleep(job.interval_seconds)
            try:
                await self.run_job_once(job.name)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Job %s failed; retrying in %ss", job.name, job.interval_seconds)

    def start(self) -> None:
        if self.running:
            return
        for job in self._jobs.values():
            self._tasks[job.name] = asyncio.create_task(self._loop(job), name=f"maintenance:{job.name}")
            logger.info("Scheduled job %s every %ss", job.name, job.interval_seconds)

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("Maintenance jobs stopped")
