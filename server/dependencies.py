"""FastAPI dependencies for authentication and job host access."""

from fastapi import Header, HTTPException, Request, status

from config.config import Config
from jobs.host import JobHost, build_job_host
from server.utils import redact_sensitive_headers
from utils.logger import get_logger

logger = get_logger(__name__)


async def get_api_key(request: Request, x_api_key: str | None = Header(None)):
    """Validate API key from X-API-Key header against Config.API_KEYS."""
    valid_keys = Config().API_KEYS
    request_id = getattr(request.state, "request_id", "unknown")
    redacted_headers = redact_sensitive_headers(dict(request.headers))

    if not valid_keys:
        logger.error(
            "API authentication not configured",
            extra={"extra_fields": {"request_id": request_id, "headers": redacted_headers}},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="API authentication not configured",
        )

    if not x_api_key or x_api_key not in valid_keys:
        logger.warning(
            "API authentication failed",
            extra={"extra_fields": {"request_id": request_id, "headers": redacted_headers}},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or missing API key"
        )

    return x_api_key


def get_job_host() -> JobHost:
    """Dependency to get the job host (singleton, built from the environment on first use)."""
    if not hasattr(get_job_host, "_instance"):
        get_job_host._instance = build_job_host()
    return get_job_host._instance
