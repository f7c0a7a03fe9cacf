"""Health check endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from shn_canvas.api.deps import get_canvas_context
from shn_canvas.context import CanvasContext
from shn_canvas.store.firestore import FirestoreRestClient

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple liveness check.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz")
async def healthz(ctx: Annotated[CanvasContext, Depends(get_canvas_context)]) -> dict[str, Any]:
    """Report which backends are configured.

    No outbound calls are made; the store and LLM are only reported as
    configured or not.
    """
    store = "firestore" if isinstance(ctx.store, FirestoreRestClient) else "in_memory"
    llm = "configured" if ctx.config.llm.api_key else "not_configured"
    return {
        "status": "ok",
        "components": {"store": store, "llm": llm, "model": ctx.config.llm.model},
    }
