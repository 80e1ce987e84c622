import asyncio
from datetime import timedelta

import pytest

from crm_api.core.cache import ResponseCache
from crm_api.domain.audit import Audit
from crm_api.domain.enums import AuditStatus
from crm_api.services.maintenance import Job, MaintenanceScheduler, default_jobs
from tests.conftest import CLIENT_ID, NOW


def test_default_jobs():
    assert [job.name for job in default_jobs()] == ["tier_update", "schedule_update", "overdue_sweep"]


async def test_run_job_once_commits(session_factory, clock, session, make_company, ceo):
    company = await make_company(age_days=100)
    session.add(
        Audit(
            client_id=CLIENT_ID,
            company_id=company.id,
            scheduled_date=NOW - timedelta(days=1),
            assigned_to=ceo.id,
            status=AuditStatus.SCHEDULED.value,
        )
    )
    await session.commit()

    scheduler = MaintenanceScheduler(session_factory, CLIENT_ID, clock=clock)
    result = await scheduler.run_job_once("overdue_sweep")

    assert result.marked_count == 1
    async with session_factory() as fresh:
        audits = (await fresh.execute(Audit.__table__.select())).all()
        assert [row.status for row in audits] == [AuditStatus.OVERDUE.value]


async def test_successful_run_invalidates_cached_reads(session_factory, clock):
    cache = ResponseCache()
    cache.set("/api/v1/audits/statistics?|u", {"data": {"overdue": 0}})
    cache.set("/api/v1/audits/overdue?|u", {"data": []})
    cache.set("/api/v1/users?|u", {"data": []})

    scheduler = MaintenanceScheduler(session_factory, CLIENT_ID, clock=clock, cache=cache)
    await scheduler.run_job_once("overdue_sweep")

    assert cache.get("/api/v1/audits/statistics?|u") is None
    assert cache.get("/api/v1/audits/overdue?|u") is None
    assert cache.get("/api/v1/users?|u") == {"data": []}


async def test_failed_run_keeps_cache(session_factory):
    async def boom(session, client_id, clock):
        raise RuntimeError("storage down")

    cache = ResponseCache()
    cache.set("/api/v1/audits?|u", {"data": []})
    scheduler = MaintenanceScheduler(
        session_factory, CLIENT_ID, jobs=[Job("boom", 1, boom, stale_resources=("audits",))], cache=cache
    )
    with pytest.raises(RuntimeError):
        await scheduler.run_job_once("boom")
    assert cache.get("/api/v1/audits?|u") == {"data": []}


async def test_failing_job_rolls_back_and_raises(session_factory):
    async def boom(session, client_id, clock):
        raise RuntimeError("storage down")

    scheduler = MaintenanceScheduler(session_factory, CLIENT_ID, jobs=[Job("boom", 1, boom)])
    with pytest.raises(RuntimeError):
        await scheduler.run_job_once("boom")


async def test_loop_keeps_running_after_failure(session_factory):
    calls = []

    async def flaky(session, client_id, clock):
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("first run fails")
        return "ok"

    scheduler = MaintenanceScheduler(session_factory, CLIENT_ID, jobs=[Job("flaky", 0, flaky)])
    scheduler.start()
    assert scheduler.running
    for _ in range(50):
        if len(calls) >= 2:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert len(calls) >= 2
    assert not scheduler.running
