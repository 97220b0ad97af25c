import asyncio

import pytest

from jobs.steps import StepRunner
from jobs.store import MISSING, InMemoryStepStore, SqlStepStore, create_step_store
from models.errors import StepError
from models.job_run import Event, JobRun, RunStatus


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    if request.param == "memory":
        return InMemoryStepStore()
    return SqlStepStore(database_url="sqlite://")


def test_missing_step_is_distinct_from_none(any_store):
    assert any_store.get_step("run-1", "extract urls") is MISSING
    any_store.save_step("run-1", "extract urls", None)
    assert any_store.get_step("run-1", "extract urls") is None


def test_first_save_wins(any_store):
    any_store.save_step("run-1", "scrape-urls", "first")
    any_store.save_step("run-1", "scrape-urls", "second")
    assert any_store.get_step("run-1", "scrape-urls") == "first"


def test_steps_are_scoped_by_run(any_store):
    any_store.save_step("run-1", "extract urls", ["https://a.test"])
    assert any_store.get_step("run-2", "extract urls") is MISSING


def test_list_steps_in_completion_order(any_store):
    any_store.save_step("run-1", "extract urls", ["https://a.test"])
    any_store.save_step("run-1", "scrape-urls", "content-A")
    assert any_store.list_steps("run-1") == {
        "extract urls": ["https://a.test"],
        "scrape-urls": "content-A",
    }


def test_run_round_trip(any_store):
    run = JobRun(
        run_id="run-1",
        function_id="demo-generate",
        event=Event(name="demo/generate", data={"prompt": "Q"}),
    )
    any_store.save_run(run)

    run.status = RunStatus.FAILED
    run.attempts = 2
    run.error = "boom"
    any_store.save_run(run)

    loaded = any_store.get_run("run-1")
    assert loaded.status == RunStatus.FAILED
    assert loaded.attempts == 2
    assert loaded.error == "boom"
    assert loaded.event.data == {"prompt": "Q"}
    assert loaded.event.id == run.event.id
    assert any_store.get_run("nope") is None


def test_in_memory_store_returns_copies():
    store = InMemoryStepStore()
    store.save_step("run-1", "extract urls", ["https://a.test"])
    store.get_step("run-1", "extract urls").append("https://evil.test")
    assert store.get_step("run-1", "extract urls") == ["https://a.test"]


def test_create_step_store_defaults_to_memory():
    assert isinstance(create_step_store(None), InMemoryStepStore)
    assert isinstance(create_step_store("sqlite://"), SqlStepStore)


def test_recorded_step_is_not_executed_again(store):
    calls = []

    def extract():
        calls.append(1)
        return ["https://a.test"]

    first = asyncio.run(StepRunner("run-1", store).run("extract urls", extract))
    second = asyncio.run(StepRunner("run-1", store).run("extract urls", extract))

    assert first == second == ["https://a.test"]
    assert len(calls) == 1


def test_async_step_is_awaited(store):
    async def scrape():
        return "content"

    assert asyncio.run(StepRunner("run-1", store).run("scrape-urls", scrape)) == "content"


def test_failed_step_raises_step_error_and_records_nothing(store):
    def boom():
        raise RuntimeError("provider down")

    with pytest.raises(StepError) as exc_info:
        asyncio.run(StepRunner("run-1", store).run("generate text", boom))

    assert exc_info.value.step_name == "generate text"
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert store.get_step("run-1", "generate text") is MISSING


def _run(run_id, status):
    return JobRun(
        run_id=run_id,
        function_id="demo-generate",
        event=Event(name="demo/generate", data={"prompt": "Q"}),
        status=status,
    )


def test_finished_runs_expire_with_their_steps():
    now = [0.0]
    store = InMemoryStepStore(retention_s=60, clock=lambda: now[0])

    store.save_run(_run("done", RunStatus.COMPLETED))
    store.save_step("done", "extract urls", [])
    store.save_step("done", "scrape-urls", "")
    store.save_run(_run("busy", RunStatus.RUNNING))
    store.save_step("busy", "extract urls", [])

    now[0] = 59
    assert store.get_run("done") is not None

    now[0] = 61
    assert store.get_run("done") is None
    assert store.list_steps("done") == {}
    assert store.get_step("done", "extract urls") is MISSING

    assert store.get_run("busy").status == RunStatus.RUNNING
    assert store.list_steps("busy") == {"extract urls": []}


def test_retention_clock_starts_when_run_finishes():
    now = [0.0]
    store = InMemoryStepStore(retention_s=10, clock=lambda: now[0])

    store.save_run(_run("run-1", RunStatus.RUNNING))
    now[0] = 100
    store.save_run(_run("run-1", RunStatus.FAILED))

    now[0] = 105
    assert store.get_run("run-1").status == RunStatus.FAILED
    now[0] = 111
    assert store.get_run("run-1") is None


def test_without_retention_runs_are_kept():
    now = [0.0]
    store = InMemoryStepStore(clock=lambda: now[0])
    store.save_run(_run("done", RunStatus.COMPLETED))
    now[0] = 10**9
    assert store.get_run("done") is not None


def test_sql_store_insert_race_keeps_first_output(monkeypatch):
    store = SqlStepStore(database_url="sqlite://")
    store.save_step("run-1", "scrape-urls", "first")

    # Second writer misses the existence check, as if both checked before either inserted
    monkeypatch.setattr("db.repository.get_step_result", lambda *args: None)
    store.save_step("run-1", "scrape-urls", "second")

    monkeypatch.undo()
    assert store.get_step("run-1", "scrape-urls") == "first"
