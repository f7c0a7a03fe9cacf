"""Shell endpoint - POST /shell/render."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from shn_canvas.api.deps import get_recorder
from shn_canvas.shell.recorder import TurnRecorder
from shn_canvas.shell.renderer import render_app_shell

router = APIRouter(prefix="/shell", tags=["shell"])


class RenderRequest(BaseModel):
    """Request body for POST /shell/render."""

    model_config = ConfigDict(populate_by_name=True)

    html: str = Field(..., description="Turn markup, injected verbatim")
    title: str | None = None
    canvas_id: str | None = Field(None, alias="canvasId")
    page: str | None = Field(None, description="Host page HTML; defaults to a minimal page")
    save: bool = Field(True, description="Persist the turn after rendering")


@router.post("/render", response_class=HTMLResponse)
async def render_shell(
    request: RenderRequest,
    background_tasks: BackgroundTasks,
    recorder: Annotated[TurnRecorder, Depends(get_recorder)],
) -> HTMLResponse:
    """Render turn markup into the host page and save it in the background.

    The save never affects the response; its failures are only logged.
    """
    html = render_app_shell(request.html, title=request.title, page=request.page)
    if request.save:
        background_tasks.add_task(recorder.save_canvas_quietly, request.html, request.title, request.canvas_id)
    return HTMLResponse(content=html)
