"""Clip extraction endpoint."""

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from clip_extractor.config import AppConfig
from clip_extractor.dependencies import get_config, get_handler
from clip_extractor.domain import CancellationToken
from clip_extractor.exceptions import (
    ExtractionError,
    InvalidRequestError,
    TranscodeFailedError,
)
from clip_extractor.handlers import ExtractionHandler
from clip_extractor.request_models import ExtractionRequest
from clip_extractor.response_models import ExtractionResponse, HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["extraction"])

ConfigDep = Annotated[AppConfig, Depends(get_config)]
HandlerDep = Annotated[ExtractionHandler, Depends(get_handler)]

DISCONNECT_POLL_SECONDS = 0.5


async def _cancel_on_disconnect(request: Request, token: CancellationToken) -> None:
    while not token.cancelled:
        if await request.is_disconnected():
            logger.warning("Client disconnected, cancelling extraction")
            token.cancel()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


def _error_detail(error: ExtractionError, expose_detail: bool) -> str:
    if expose_detail and isinstance(error, TranscodeFailedError) and error.stderr:
        return f"{error}: {error.stderr}"
    return str(error)


@router.post(
    "/extract",
    response_model=ExtractionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def extract_clip(
    body: ExtractionRequest,
    request: Request,
    handler: HandlerDep,
    config: ConfigDep,
) -> ExtractionResponse:
    """
    Cuts a clip out of a stored media file and stores it next to the destination.

    The extraction runs in the thread pool. It is cancelled when the client
    goes away or the request deadline passes.
    """
    token = CancellationToken(timeout=config.server.request_timeout)
    watcher = asyncio.create_task(_cancel_on_disconnect(request, token))
    try:
        result = await run_in_threadpool(handler.process, body.to_job(), token)
    except InvalidRequestError as e:
        logger.info("Rejected extraction request", extra={"reason": str(e)})
        raise HTTPException(status_code=e.status_code, detail=str(e))
    except ExtractionError as e:
        logger.error(
            "Extraction failed",
            extra={"error_type": type(e).__name__, "error": str(e)},
        )
        raise HTTPException(
            status_code=e.status_code,
            detail=_error_detail(e, config.expose_error_detail),
        )
    finally:
        watcher.cancel()

    return ExtractionResponse(file_url=result.locator)


@router.get("/healthz", response_model=HealthResponse)
def health() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse()
