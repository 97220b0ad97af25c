import asyncio

import pytest

from jobs.enrichment import register_enrichment_function
from jobs.registry import FunctionRegistry
from jobs.runner import JobRunner, is_retryable
from jobs.store import InMemoryStepStore
from models.errors import ConfigError, GenerationError, StepError
from models.job_run import Event, RunStatus


def _event(prompt="See https://a.test and https://b.test now"):
    return Event(name="demo/generate", data={"prompt": prompt})


def test_send_creates_one_queued_run_per_function(make_runner, scraper, generator, store):
    runner = make_runner(scraper, generator)
    run_ids = runner.send(_event())

    assert len(run_ids) == 1
    run = store.get_run(run_ids[0])
    assert run.status == RunStatus.QUEUED
    assert run.function_id == "demo-generate"


def test_unknown_event_creates_no_runs(make_runner, scraper, generator):
    runner = make_runner(scraper, generator)
    assert runner.send(Event(name="other/event", data={})) == []


def test_successful_run_completes_with_generation_output(make_runner, scraper, generator):
    runner = make_runner(scraper, generator)
    (run,) = asyncio.run(runner.send_and_execute(_event()))

    assert run.status == RunStatus.COMPLETED
    assert run.attempts == 1
    assert run.output["text"] == "generated answer"
    assert run.error is None


def test_retry_after_generation_failure_does_not_repeat_earlier_steps(
    make_runner, scraper, scrape_client, make_generator
):
    generator = make_generator(failures=1)
    runner = make_runner(scraper, generator)

    (run,) = asyncio.run(runner.send_and_execute(_event()))

    assert run.status == RunStatus.COMPLETED
    assert run.attempts == 2
    # Scraped once, generated twice with the same final prompt
    assert scrape_client.calls == ["https://a.test", "https://b.test"]
    assert len(generator.prompts) == 2
    assert generator.prompts[0] == generator.prompts[1]


def test_run_failing_every_attempt_is_marked_failed(make_runner, scraper, scrape_client, make_generator):
    generator = make_generator(failures=10)
    runner = make_runner(scraper, generator, max_attempts=3)

    (run,) = asyncio.run(runner.send_and_execute(_event()))

    assert run.status == RunStatus.FAILED
    assert run.attempts == 3
    assert "fake provider outage" in run.error
    assert len(scrape_client.calls) == 2
    assert len(generator.prompts) == 3


def test_non_retryable_failure_stops_after_first_attempt(make_runner, scraper, make_generator):
    generator = make_generator(failures=10, retryable=False)
    runner = make_runner(scraper, generator, max_attempts=3)

    (run,) = asyncio.run(runner.send_and_execute(_event()))

    assert run.status == RunStatus.FAILED
    assert run.attempts == 1


def test_finished_run_is_not_executed_again(make_runner, scraper, generator):
    runner = make_runner(scraper, generator)
    (run,) = asyncio.run(runner.send_and_execute(_event()))

    again = asyncio.run(runner.execute(run.run_id))

    assert again.status == RunStatus.COMPLETED
    assert again.attempts == 1
    assert len(generator.prompts) == 1


def test_execute_unknown_run_raises(make_runner, scraper, generator):
    runner = make_runner(scraper, generator)
    with pytest.raises(KeyError):
        asyncio.run(runner.execute("missing"))


def test_all_functions_for_an_event_run(store):
    registry = FunctionRegistry()
    seen = []

    @registry.create_function(id="first", event="user/signup")
    async def first(event, step):
        return await step.run("record", lambda: seen.append("first") or "ok")

    @registry.create_function(id="second", event="user/signup")
    async def second(event, step):
        return await step.run("record", lambda: seen.append("second") or "ok")

    runner = JobRunner(registry, store, retry_base_delay_s=0)
    runs = asyncio.run(runner.send_and_execute(Event(name="user/signup", data={})))

    assert sorted(seen) == ["first", "second"]
    assert all(r.status == RunStatus.COMPLETED for r in runs)


def test_duplicate_function_id_is_rejected():
    registry = FunctionRegistry()

    @registry.create_function(id="dup", event="a")
    async def one(event, step):
        return None

    with pytest.raises(ValueError):

        @registry.create_function(id="dup", event="b")
        async def two(event, step):
            return None


def test_retry_policy():
    assert is_retryable(RuntimeError("network"))
    assert is_retryable(StepError("generate text", GenerationError("503", retryable=True)))
    assert not is_retryable(StepError("generate text", GenerationError("400", retryable=False)))
    assert not is_retryable(StepError("scrape-urls", ConfigError("missing key")))


@pytest.mark.parametrize("prompt", [None, 42, ["https://a.test"]])
def test_non_string_prompt_fails_without_retry(make_runner, scraper, scrape_client, generator, prompt):
    runner = make_runner(scraper, generator, max_attempts=3)
    (run,) = asyncio.run(runner.send_and_execute(Event(name="demo/generate", data={"prompt": prompt})))

    assert run.status == RunStatus.FAILED
    assert run.attempts == 1
    assert "must be a string" in run.error
    assert generator.prompts == []
    assert scrape_client.calls == []


def test_in_memory_store_does_not_keep_expired_runs(scraper, generator):
    store = InMemoryStepStore(retention_s=0)
    registry = FunctionRegistry()
    register_enrichment_function(registry, scraper=scraper, generator=generator)
    runner = JobRunner(registry, store, retry_base_delay_s=0)

    run_ids = []
    for _ in range(20):
        (run,) = asyncio.run(runner.send_and_execute(_event()))
        assert run.status == RunStatus.COMPLETED
        run_ids.append(run.run_id)

    assert all(store.get_run(run_id) is None for run_id in run_ids)
    assert all(store.list_steps(run_id) == {} for run_id in run_ids)
