"""Settings endpoints - GET /settings, PUT /settings."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from shn_canvas.api.deps import get_canvas_context, get_config_store, reset_canvas_context
from shn_canvas.config import Settings, get_settings
from shn_canvas.context import CanvasContext
from shn_canvas.settings_store import CanvasConfig, LocalConfigStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class SettingsResponse(BaseModel):
    """Effective configuration with secrets masked."""

    llm_api_key: str
    llm_model: str
    firebase_api_key: str
    firebase_project_id: str
    firebase_auth_domain: str
    llm_configured: bool
    store_configured: bool


def mask_secret(value: str, visible: int = 4) -> str:
    """Mask all but the last few characters of a secret."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]


def to_settings_response(config: CanvasConfig) -> SettingsResponse:
    return SettingsResponse(
        llm_api_key=mask_secret(config.llm.api_key),
        llm_model=config.llm.model,
        firebase_api_key=mask_secret(config.firebase.api_key),
        firebase_project_id=config.firebase.project_id,
        firebase_auth_domain=config.firebase.auth_domain,
        llm_configured=bool(config.llm.api_key),
        store_configured=config.firebase.is_configured,
    )


@router.get("", response_model=SettingsResponse)
async def read_settings(ctx: Annotated[CanvasContext, Depends(get_canvas_context)]) -> SettingsResponse:
    """Return the effective configuration (stored blob over environment)."""
    return to_settings_response(ctx.config)


@router.put("", response_model=SettingsResponse)
async def update_settings(
    request: CanvasConfig,
    config_store: Annotated[LocalConfigStore, Depends(get_config_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SettingsResponse:
    """Persist credentials and rebuild the canvas context.

    Args:
        request: Full config blob (``llm`` and ``firebase`` sections)
        config_store: Local config blob store
        settings: Environment settings used for fields left empty

    Returns:
        The effective configuration after the save, masked
    """
    config_store.save(request)
    await reset_canvas_context()
    logger.info("Canvas settings updated")
    return to_settings_response(config_store.load(settings))
