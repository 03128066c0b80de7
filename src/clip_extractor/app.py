"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from clip_extractor import __version__, dependencies
from clip_extractor.routes import extract_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Connects to storage and sets up the transcoder before serving requests.

    An unreachable store or a bad configuration stops startup instead of
    failing every request.
    """
    try:
        dependencies.get_object_store()
        dependencies.get_transcoder()
    except Exception:
        logger.exception("Failed to initialize clip extractor")
        raise
    logger.info("Clip extractor ready")
    yield


async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are client errors, reported as 400 rather than 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Clip Extractor", version=__version__, lifespan=lifespan)
    app.add_exception_handler(RequestValidationError, _bad_request)
    app.include_router(extract_router)
    return app
