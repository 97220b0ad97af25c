"""Demo endpoints: the same enrichment job run inline vs. in the background."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from jobs.enrichment import TRIGGER_EVENT, run_inline
from jobs.host import JobHost
from models.errors import StepError
from models.job_run import Event
from server.dependencies import get_api_key, get_job_host
from server.routes.events import dispatch_event
from server.schemas.requests import DemoRequest
from server.schemas.responses import EventAcceptedDTO, GenerationResponseDTO
from server.utils import DEFAULT_DEMO_PROMPT
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/demo", tags=["Demo"])


@router.post("/blocking", response_model=GenerationResponseDTO)
async def demo_blocking(
    request: DemoRequest | None = None,
    api_key: str = Depends(get_api_key),
    host: JobHost = Depends(get_job_host),
):
    """Run the enrichment pipeline inside the request and return the generated text."""
    prompt = (request.prompt if request else None) or DEFAULT_DEMO_PROMPT
    try:
        result = await run_inline(prompt, scraper=host.scraper, generator=host.generator)
    except StepError as e:
        logger.error(
            f"Blocking demo failed: {e}",
            extra={"extra_fields": {"step": e.step_name, "error_type": type(e.cause).__name__}},
        )
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail=f"Step '{e.step_name}' failed"
        ) from e
    return GenerationResponseDTO.from_generation_result(result)


@router.post("/background", response_model=EventAcceptedDTO, status_code=status.HTTP_202_ACCEPTED)
async def demo_background(
    background_tasks: BackgroundTasks,
    request: DemoRequest | None = None,
    api_key: str = Depends(get_api_key),
    host: JobHost = Depends(get_job_host),
):
    """Send a demo/generate event and return immediately."""
    prompt = (request.prompt if request else None) or DEFAULT_DEMO_PROMPT
    event = Event(name=TRIGGER_EVENT, data={"prompt": prompt})
    run_ids = dispatch_event(event, host, background_tasks)
    return EventAcceptedDTO(event_id=event.id, ids=run_ids)
