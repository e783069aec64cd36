"""ReplyDesk API - Main FastAPI Application."""

import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pythonjsonlogger.json import JsonFormatter

from replydesk import __version__
from replydesk.api.routes import health, messages
from replydesk.core.config import settings
from replydesk.core.exceptions import ReplyDeskError, sanitize_error
from replydesk.services.scheduler import start_scheduler, stop_scheduler


def _configure_logging() -> None:
    """Set up logging based on the LOG_FORMAT setting.

    json: Structured JSON via python-json-logger (for production).
    text: Human-readable format (for local development).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicate output
    root_logger.handlers.clear()

    handler = logging.StreamHandler()

    if settings.LOG_FORMAT == "json":
        handler.setFormatter(
            JsonFormatter(
                fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                rename_fields={
                    "asctime": "timestamp",
                    "levelname": "level",
                    "name": "service",
                },
                static_fields={"app": "replydesk-api"},
            )
        )
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(handler)


_configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> Any:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting ReplyDesk API...")
    try:
        settings.validate_startup()
    except ValueError as e:
        logger.warning("Configuration incomplete: %s", e)

    await start_scheduler()
    yield
    logger.info("Shutting down ReplyDesk API...")
    await stop_scheduler()


app = FastAPI(
    title="ReplyDesk API",
    description="Support-reply triage: review queue, send-by-id and archival",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(messages.router)
app.include_router(health.router)


@app.get("/", tags=["system"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "ReplyDesk API",
        "version": __version__,
    }


@app.exception_handler(ReplyDeskError)
async def replydesk_exception_handler(request: Request, exc: ReplyDeskError) -> JSONResponse:
    """Handle ReplyDesk-specific exceptions.

    Args:
        request: The incoming request.
        exc: The ReplyDesk exception.

    Returns:
        JSON error response with consistent format.
    """
    # 5xx messages may carry upstream internals.
    detail = exc.message if exc.status_code < 500 else sanitize_error(exc)
    request_id = str(uuid.uuid4())
    logger.warning(
        "ReplyDesk exception occurred",
        extra={
            "code": exc.code,
            "status_code": exc.status_code,
            "request_id": request_id,
            "path": request.url.path,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": detail,
            "code": exc.code,
            "request_id": request_id,
        },
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors.

    Args:
        request: The incoming request.
        exc: The validation exception.

    Returns:
        JSON error response with validation details.
    """
    request_id = str(uuid.uuid4())
    logger.warning(
        "Request validation error",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "errors": json.dumps(exc.errors(), default=str),
        },
    )
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_ERROR",
            "request_id": request_id,
            "errors": json.loads(json.dumps(exc.errors(), default=str)),
        },
    )
