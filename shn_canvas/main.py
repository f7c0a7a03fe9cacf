"""FastAPI application."""

from fastapi import FastAPI

from shn_canvas.api.routes.extraction import router as extraction_router
from shn_canvas.api.routes.health import router as health_router
from shn_canvas.api.routes.metrics import router as metrics_router
from shn_canvas.api.routes.sessions import router as sessions_router
from shn_canvas.api.routes.settings import router as settings_router
from shn_canvas.api.routes.shell import router as shell_router
from shn_canvas.config import get_settings
from shn_canvas.utils.logging import configure_logging

configure_logging(get_settings().log_level)

app = FastAPI(title="SHN Canvas API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(settings_router)
app.include_router(shell_router)
app.include_router(sessions_router)
app.include_router(extraction_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "SHN Canvas API", "version": "0.1.0"}
