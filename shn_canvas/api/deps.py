"""FastAPI dependencies: settings, canvas context, services and error mapping."""

import logging
from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status

from shn_canvas.config import Settings, get_settings
from shn_canvas.context import CanvasContext
from shn_canvas.errors import (
    CanvasError,
    ConfigurationMissingError,
    ExtractionNotFoundError,
    SessionNotFoundError,
    UpstreamHTTPError,
)
from shn_canvas.extraction.pipeline import ExtractionPipeline
from shn_canvas.llm.client import GeminiClient, get_llm_client
from shn_canvas.sessions.service import SessionService
from shn_canvas.settings_store import CanvasConfig, LocalConfigStore
from shn_canvas.shell.recorder import TurnRecorder
from shn_canvas.store.firestore import FirestoreRestClient
from shn_canvas.store.inmemory import InMemoryDocumentStore
from shn_canvas.store.repositories import DocumentStore

logger = logging.getLogger(__name__)


def build_store(config: CanvasConfig, settings: Settings) -> DocumentStore:
    """Firestore when credentials are present, otherwise a process-local store."""
    if config.firebase.is_configured:
        logger.info(f"Using Firestore project {config.firebase.project_id}")
        return FirestoreRestClient(
            project_id=config.firebase.project_id,
            api_key=config.firebase.api_key,
            base_url=settings.firestore_base_url,
            timeout=settings.http_timeout_seconds,
        )
    logger.warning("Firestore not configured; using in-memory document store")
    return InMemoryDocumentStore()


def get_config_store(settings: Annotated[Settings, Depends(get_settings)]) -> LocalConfigStore:
    return LocalConfigStore(settings.config_path)


@lru_cache
def get_canvas_context() -> CanvasContext:
    """Process-wide canvas context, rebuilt after settings are saved."""
    settings = get_settings()
    config = LocalConfigStore(settings.config_path).load(settings)
    return CanvasContext(config=config, store=build_store(config, settings))


async def reset_canvas_context() -> None:
    """Drop the cached context, closing its Firestore client first."""
    if get_canvas_context.cache_info().currsize:
        store = get_canvas_context().store
        if isinstance(store, FirestoreRestClient):
            await store.aclose()
    get_canvas_context.cache_clear()


async def get_llm(
    ctx: Annotated[CanvasContext, Depends(get_canvas_context)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AsyncGenerator[GeminiClient | None, None]:
    """Yield a Gemini client for the request, or None when no key is configured."""
    try:
        client = get_llm_client(
            ctx.config, base_url=settings.gemini_base_url, timeout=settings.http_timeout_seconds
        )
    except ConfigurationMissingError:
        yield None
        return
    try:
        yield client
    finally:
        await client.aclose()


def get_pipeline(
    ctx: Annotated[CanvasContext, Depends(get_canvas_context)],
    settings: Annotated[Settings, Depends(get_settings)],
    llm: Annotated[GeminiClient | None, Depends(get_llm)],
) -> ExtractionPipeline | None:
    if llm is None:
        return None
    return ExtractionPipeline(
        llm,
        ctx.store,
        interactive_delay=settings.interactive_batch_delay_seconds,
        batch_delay=settings.batch_delay_seconds,
    )


def get_session_service(
    ctx: Annotated[CanvasContext, Depends(get_canvas_context)],
    pipeline: Annotated[ExtractionPipeline | None, Depends(get_pipeline)],
) -> SessionService:
    return SessionService(ctx, pipeline)


def get_recorder(ctx: Annotated[CanvasContext, Depends(get_canvas_context)]) -> TurnRecorder:
    return TurnRecorder(ctx)


def to_http_error(error: CanvasError) -> HTTPException:
    """Map a canvas error to an HTTPException with a short status string.

    400 for missing configuration, 404 for missing sessions or extractions,
    502 for everything else (store, LLM and extraction failures).
    """
    if isinstance(error, ConfigurationMissingError):
        logger.warning(f"Configuration missing: {error.setting}")
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(error, (SessionNotFoundError, ExtractionNotFoundError)):
        logger.warning(str(error))
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, UpstreamHTTPError):
        logger.error(f"{error.service} error {error.status_code}: {error.body[:200]}")
        code = status.HTTP_502_BAD_GATEWAY
    else:
        logger.exception(f"Request failed: {error}")
        code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail={"status": error.status_text, "message": str(error)})
