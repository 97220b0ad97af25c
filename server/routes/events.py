"""Event intake and run status endpoints."""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from jobs.host import JobHost
from models.job_run import Event
from server.dependencies import get_api_key, get_job_host
from server.schemas.requests import EventRequest
from server.schemas.responses import EventAcceptedDTO, RunStatusDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Events"])


def dispatch_event(event: Event, host: JobHost, background_tasks: BackgroundTasks) -> list[str]:
    """Queue one run per triggered function and execute them after the response is sent."""
    run_ids = host.runner.send(event)
    for run_id in run_ids:
        background_tasks.add_task(host.runner.execute, run_id)
    return run_ids


@router.post("/events", response_model=EventAcceptedDTO, status_code=status.HTTP_202_ACCEPTED)
async def send_event(
    request: EventRequest,
    http_request: Request,
    background_tasks: BackgroundTasks,
    api_key: str = Depends(get_api_key),
    host: JobHost = Depends(get_job_host),
):
    """Accept an event; triggered job functions run in the background."""
    event = Event(name=request.name, data=request.data)
    run_ids = dispatch_event(event, host, background_tasks)

    logger.info(
        "Event accepted",
        extra={
            "extra_fields": {
                "request_id": getattr(http_request.state, "request_id", "unknown"),
                "event_id": event.id,
                "event_name": event.name,
                "run_count": len(run_ids),
            }
        },
    )
    return EventAcceptedDTO(event_id=event.id, ids=run_ids)


@router.get("/runs/{run_id}", response_model=RunStatusDTO)
async def get_run(
    run_id: str,
    api_key: str = Depends(get_api_key),
    host: JobHost = Depends(get_job_host),
):
    """Current status of a run, with the outputs of its completed steps."""
    run = host.runner.get_run(run_id)
    if run is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Run not found")
    return RunStatusDTO.from_job_run(run, steps=host.runner.store.list_steps(run_id))
