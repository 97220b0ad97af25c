"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.config import Config
from models.errors import ConfigError
from server.middleware import RequestIDMiddleware
from server.routes import demo, events, health
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info("FastAPI server starting up")

    config = Config()
    missing = config.validate()
    if not config.API_KEYS:
        missing.append("API_KEYS")
    if missing:
        logger.warning(f"Missing environment variables: {missing}")

    yield

    logger.info("FastAPI server shutting down")


async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    logger.error(
        f"Service misconfigured: {exc}",
        extra={"extra_fields": {"request_id": getattr(request.state, "request_id", "unknown")}},
    )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Service not configured"},
    )


def create_app() -> FastAPI:
    """Factory function to create FastAPI application."""
    app = FastAPI(
        title="PromptEnrich API",
        description="Prompt enrichment jobs: scrape linked pages, then generate with context",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ConfigError, config_error_handler)

    app.include_router(health.router)
    app.include_router(events.router)
    app.include_router(demo.router)

    return app
