"""Ideogram Relay: FastAPI Application.

This module defines the FastAPI application factory, the REST routes, the
error-to-response mapping, and the ``main()`` CLI function that launches the
uvicorn server.

Architecture
------------
The application is a stateless relay:

- **Configuration** is a single :class:`~ideogram_relay.core.config.RelayConfig`
  built at startup (in ``main()`` or the lifespan hook), never at import.
- **Request handling** is delegated to
  :class:`~ideogram_relay.core.pipeline.RelayPipeline`, stored on
  ``app.state``.  Tests inject a pipeline wired to stub clients via
  ``create_app(pipeline=...)``.
- **Blocking work** (HTTP calls, transcoding, uploads) runs in FastAPI's
  worker thread pool: JSON routes are plain ``def`` functions and the
  multipart remix route uses ``run_in_threadpool``.
- **Errors** raised by the pipeline are
  :class:`~ideogram_relay.core.errors.RelayError` subclasses; one exception
  handler turns them into ``{"error": message}`` with status 400 or 500.
  Any other exception is reported the same way with status 500.

Endpoints
---------
========  ==================  ==========================================
Method    Path                Purpose
========  ==================  ==========================================
GET       ``/``               Health check
POST      ``/api/generate``   Text-to-image, stored under ideogram-images
POST      ``/api/reframe``    Reframe an image URL, ideogram-reframed
POST      ``/api/remix``      Remix a file or URL, ideogram-remixed
========  ==================  ==========================================

Usage
-----
CLI (installed entry point)::

    ideogram-relay

Direct invocation::

    python -m ideogram_relay.api.main
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException

from ideogram_relay import __version__
from ideogram_relay.api.models import (
    ErrorResult,
    GenerateRequest,
    OperationResult,
    ReframeRequest,
    RemixRequest,
)
from ideogram_relay.core.config import RelayConfig
from ideogram_relay.core.errors import RelayError, ValidationError
from ideogram_relay.core.pipeline import RelayPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_ERROR_RESPONSES = {
    400: {"model": ErrorResult, "description": "Missing or malformed input"},
    500: {"model": ErrorResult, "description": "Generation, download, transcode or upload failed"},
}


# ---------------------------------------------------------------------------
# Application lifecycle.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the pipeline on startup unless one was injected.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    if app.state.pipeline is None:
        config = app.state.config if app.state.config is not None else RelayConfig()
        app.state.config = config
        app.state.pipeline = RelayPipeline.from_config(config)
        logger.info("Relay pipeline initialised (Ideogram at %s).", config.ideogram_base_url)

    yield


# ---------------------------------------------------------------------------
# Error mapping.
# ---------------------------------------------------------------------------


async def _relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Map a pipeline failure to ``{"error": message}``."""
    message = exc.message or "Failed to process image"
    if exc.status_code < 500:
        logger.warning("Rejected %s: %s", request.url.path, message)
    else:
        logger.error("Error processing %s: %s", request.url.path, message)
    return JSONResponse(status_code=exc.status_code, content={"error": message})


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report any other failure as 500 ``{"error": message}``."""
    message = str(exc) or "Failed to process image"
    logger.error("Unexpected error processing %s: %s", request.url.path, message, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies as 400 in the relay's error shape."""
    errors = exc.errors()
    detail = errors[0].get("msg", "invalid value") if errors else "invalid value"
    logger.warning("Malformed body on %s: %s", request.url.path, detail)
    return JSONResponse(status_code=400, content={"error": f"Invalid request body: {detail}"})


def get_pipeline(request: Request) -> RelayPipeline:
    """FastAPI dependency returning the application's pipeline."""
    return request.app.state.pipeline


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/")
async def index() -> dict:
    """Health check."""
    return {"status": "Server is running", "message": "Ideogram API integration server"}


@router.post("/api/generate", response_model=OperationResult, responses=_ERROR_RESPONSES)
def generate_image(
    req: GenerateRequest | None = None,
    pipeline: RelayPipeline = Depends(get_pipeline),
) -> OperationResult:
    """Generate an image from a prompt and store it as PNG.

    Returns:
        ``{success, original_url, cloudinary_url, public_id}``.
    """
    return pipeline.generate(req or GenerateRequest())


@router.post("/api/reframe", response_model=OperationResult, responses=_ERROR_RESPONSES)
def reframe_image(
    req: ReframeRequest | None = None,
    pipeline: RelayPipeline = Depends(get_pipeline),
) -> OperationResult:
    """Reframe an image by URL and store the result as PNG."""
    return pipeline.reframe(req or ReframeRequest())


@router.post("/api/remix", response_model=OperationResult, responses=_ERROR_RESPONSES)
async def remix_image(
    request: Request,
    pipeline: RelayPipeline = Depends(get_pipeline),
) -> OperationResult:
    """Remix an uploaded file or an image URL and store the result as PNG.

    Accepts either ``multipart/form-data`` (an ``image`` file plus text
    fields) or a JSON body.  A non-empty uploaded file wins over
    ``image_url``.

    Raises:
        ValidationError: If the JSON or form body cannot be parsed.
    """
    upload: bytes | None = None
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        try:
            form = await request.form()
        except (StarletteHTTPException, MultiPartException, ValueError) as exc:
            raise ValidationError("Invalid request body: malformed form data") from exc
        try:
            fields = {key: value for key, value in form.items() if isinstance(value, str)}
            image = form.get("image")
            if isinstance(image, UploadFile):
                upload = await image.read() or None
        finally:
            await form.close()
    else:
        raw = await request.body()
        try:
            fields = json.loads(raw) if raw else {}
        except ValueError as exc:
            raise ValidationError("Invalid request body: malformed JSON") from exc
        if not isinstance(fields, dict):
            fields = {}

    try:
        req = RemixRequest.model_validate(fields)
    except PydanticValidationError as exc:
        detail = exc.errors()[0].get("msg", "invalid value")
        raise ValidationError(f"Invalid request body: {detail}") from exc

    return await run_in_threadpool(pipeline.remix, req, upload)


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    config: RelayConfig | None = None,
    pipeline: RelayPipeline | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Configuration to build the pipeline from at startup.  When
            omitted it is loaded from the environment during startup.
        pipeline: Ready-made pipeline.  When given, no configuration is
            loaded and no real client is created.

    Returns:
        The configured application.
    """
    app = FastAPI(
        title="Ideogram Relay",
        description="Relays image generation to Ideogram and stores the results on Cloudinary.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.pipeline = pipeline

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RelayError, _relay_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(router)
    return app


# Served by ``uvicorn ideogram_relay.api.main:app``; configuration is read
# from the environment at startup.
app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Loads :class:`RelayConfig` from the environment, configures logging, and
    serves on ``config.host:config.port`` (``PORT`` defaults to 3000).
    Forwarded headers are trusted because the relay is deployed behind an
    HTTPS-terminating proxy.

    This function is registered as the ``ideogram-relay`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    config = RelayConfig()
    logging.basicConfig(level=config.log_level, format=LOG_FORMAT)

    logger.info("Server running on port %d", config.port)
    uvicorn.run(
        create_app(config=config),
        host=config.host,
        port=config.port,
        proxy_headers=True,
        forwarded_allow_ips="*",
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
