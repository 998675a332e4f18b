"""Tests for the leaderboard maintenance jobs and worker registration."""

from contextlib import asynccontextmanager

import pytest
from arq import Retry
from sqlalchemy.exc import OperationalError

from app.tasks import aggregate_jobs
from app.tasks.aggregate_jobs import assign_badges_job, reconcile_aggregates_job
from app.tasks.worker import WorkerSettings


@pytest.fixture
def job_session(db_session, monkeypatch):
    """Run jobs against the test session."""

    @asynccontextmanager
    async def _session():
        yield db_session

    monkeypatch.setattr(aggregate_jobs, "get_async_session", _session)
    return db_session


@pytest.mark.unit
class TestWorkerSettings:
    def test_jobs_registered(self):
        names = {function.coroutine.__name__ for function in WorkerSettings.functions}

        assert names == {"assign_badges_job", "reconcile_aggregates_job"}

    def test_jobs_retry(self):
        assert all(function.max_tries == 3 for function in WorkerSettings.functions)

    def test_nightly_schedule(self):
        schedule = {job.coroutine.__name__: (job.hour, job.minute) for job in WorkerSettings.cron_jobs}

        assert schedule == {
            "reconcile_aggregates_job": ({3}, {0}),
            "assign_badges_job": ({3}, {30}),
        }


@pytest.mark.services
class TestJobs:
    async def test_assign_badges_job(self, job_session, make_profile):
        star = await make_profile(average_rating=9.0, total_ratings_received=5)

        result = await assign_badges_job({"job_try": 1})

        assert result == {"success": True, "winners": [star.user_id]}
        assert star.badge_rank == 1

    async def test_reconcile_job(self, job_session, make_profile, make_image):
        await make_image(await make_profile(), average_rating=3.0, total_ratings=2)

        result = await reconcile_aggregates_job({"job_try": 1})

        assert result["success"] is True
        assert result["images_corrected"] == 1

    async def test_database_error_retries_with_backoff(self, job_session, monkeypatch):
        async def _broken(db):
            raise OperationalError("SELECT", {}, Exception("gone away"))

        monkeypatch.setattr(aggregate_jobs, "reconcile_all_aggregates", _broken)

        with pytest.raises(Retry) as exc_info:
            await reconcile_aggregates_job({"job_try": 2})

        assert exc_info.value.defer_score == 10_000
