"""Tests for the refresh scheduler wiring."""

from unittest.mock import MagicMock

from apscheduler.schedulers.background import BackgroundScheduler

from scheduler import JOB_ID, _refresh_job, add_refresh_job


def test_job_runs_at_start_and_never_overlaps():
    scheduler = BackgroundScheduler()
    runner = MagicMock()

    add_refresh_job(scheduler, runner, interval_minutes=60)

    job = scheduler.get_job(JOB_ID)
    assert job.max_instances == 1
    assert job.coalesce is True
    assert job.trigger.interval.total_seconds() == 3600
    assert job.args == (runner,)


def test_refresh_job_swallows_cycle_errors():
    runner = MagicMock()
    runner.run.side_effect = RuntimeError("boom")

    _refresh_job(runner)

    runner.run.assert_called_once()
