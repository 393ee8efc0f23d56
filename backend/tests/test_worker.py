from __future__ import annotations

from apscheduler.schedulers.background import BackgroundScheduler

from weekplan.core.config import settings
from weekplan.worker import scheduler_main
from weekplan.worker.scheduler_main import REPLAN_JOB_ID, register_jobs, run_nightly_replan


def test_register_jobs_adds_nightly_cron() -> None:
    scheduler = BackgroundScheduler(timezone="UTC")

    register_jobs(scheduler)

    job = scheduler.get_job(REPLAN_JOB_ID)
    assert job is not None
    fields = {field.name: str(field) for field in job.trigger.fields}
    assert fields["hour"] == str(settings.replan_job_hour)
    assert fields["minute"] == str(settings.replan_job_minute)


def test_nightly_replan_skips_without_plan(store) -> None:
    assert run_nightly_replan(store) is None


def test_nightly_replan_runs_cycle(store, make_goal, make_task) -> None:
    store.set_goals([make_goal()])
    store.set_tasks([make_task("a"), make_task("b", day_index=2)])

    run = run_nightly_replan(store)

    assert run is not None
    assert run.result.moved_task_ids == ["a"]
    assert store.get_task("a").status == "rescheduled"
    assert len(store.get_coach_messages()) == 1


def test_nightly_replan_swallows_failures(monkeypatch, store, make_goal, make_task) -> None:
    store.set_goals([make_goal()])
    store.set_tasks([make_task("a")])

    def boom(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr(scheduler_main, "run_replan", boom)

    assert run_nightly_replan(store) is None
