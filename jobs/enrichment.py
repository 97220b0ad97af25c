"""
Content-enrichment job.

Triggered by the "demo/generate" event with data {"prompt": str}:
1. extract urls   - find http(s) URLs in the prompt
2. scrape-urls    - scrape every URL concurrently, join the markdown
3. generate text  - ask the model, with the scraped pages as context

Each step is recorded, so a host retry after a generation failure does not
extract or scrape again.
"""

import asyncio
import uuid
from typing import Any

from api.base_client import BaseTextGenerator
from models.errors import InvalidEventError
from models.generation import GenerationResult
from models.job_run import Event
from tools.web.context_pack import build_final_prompt
from tools.web.scrape_service import ScrapeService
from tools.web.urls import extract_urls
from utils.logger import get_logger

from .registry import FunctionRegistry, JobFunction
from .steps import StepRunner
from .store import InMemoryStepStore

logger = get_logger(__name__)

FUNCTION_ID = "demo-generate"
TRIGGER_EVENT = "demo/generate"

STEP_EXTRACT_URLS = "extract urls"
STEP_SCRAPE_URLS = "scrape-urls"
STEP_GENERATE_TEXT = "generate text"


async def demo_generate(
    event: Event,
    step: StepRunner,
    *,
    scraper: ScrapeService,
    generator: BaseTextGenerator,
) -> dict[str, Any]:
    """
    Run the three enrichment steps for one event.

    Args:
        event: Trigger event; event.data["prompt"] is the user prompt
        step: Step runner for this run
        scraper: Scrape service (fan-out over URLs)
        generator: Text generator with a fixed model

    Returns:
        The generation result as a dict (also recorded as the last step's output)

    Raises:
        InvalidEventError: If event.data["prompt"] is present but not a string
        StepError: If the generation step fails
    """
    prompt = event.data.get("prompt", "")
    if not isinstance(prompt, str):
        raise InvalidEventError(f"event.data.prompt must be a string, got {type(prompt).__name__}")

    urls = await step.run(STEP_EXTRACT_URLS, lambda: extract_urls(prompt))

    scrape_content = await step.run(STEP_SCRAPE_URLS, lambda: scraper.build_context(urls))

    final_prompt = build_final_prompt(prompt, scrape_content)
    logger.info(
        "Final prompt assembled",
        extra={
            "extra_fields": {
                "run_id": step.run_id,
                "url_count": len(urls),
                "context_chars": len(scrape_content),
                "has_context": bool(scrape_content),
            }
        },
    )

    async def _generate() -> dict[str, Any]:
        # The SDK call blocks; keep it off the event loop
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, generator.generate, final_prompt)
        return result.to_dict()

    return await step.run(STEP_GENERATE_TEXT, _generate)


def register_enrichment_function(
    registry: FunctionRegistry,
    *,
    scraper: ScrapeService,
    generator: BaseTextGenerator,
) -> JobFunction:
    """Bind the clients into demo_generate and register it for "demo/generate"."""

    @registry.create_function(id=FUNCTION_ID, event=TRIGGER_EVENT)
    async def _handler(event: Event, step: StepRunner) -> dict[str, Any]:
        return await demo_generate(event, step, scraper=scraper, generator=generator)

    return _handler


async def run_inline(
    prompt: str,
    *,
    scraper: ScrapeService,
    generator: BaseTextGenerator,
) -> GenerationResult:
    """
    Run the pipeline synchronously for one prompt, without the job host.

    Steps are still recorded, but only in a throwaway in-memory store, so
    there is no retry. Used by the blocking endpoint and the CLI.
    """
    step = StepRunner(str(uuid.uuid4()), InMemoryStepStore())
    event = Event(name=TRIGGER_EVENT, data={"prompt": prompt})
    output = await demo_generate(event, step, scraper=scraper, generator=generator)
    return GenerationResult.from_dict(output)
