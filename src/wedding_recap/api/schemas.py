"""Request/Response schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from wedding_recap.models.media import MediaAssetModel, RecapSettingsModel
from wedding_recap.models.render import RenderStatus


class RecapCreateRequest(BaseModel):
    media: list[MediaAssetModel] = Field(default_factory=list)
    settings: RecapSettingsModel = Field(default_factory=RecapSettingsModel)
    api_key: Optional[str] = Field(
        default=None, description="Shotstack API key; falls back to SHOTSTACK_API_KEY"
    )
    use_media_library: bool = Field(
        default=False, description="Load media from the Supabase media table instead of `media`"
    )


class RecapStatusResponse(BaseModel):
    render_id: str
    status: RenderStatus
    progress: float
    url: Optional[str] = None
    error: Optional[str] = None
