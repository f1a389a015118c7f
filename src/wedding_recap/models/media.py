"""Pydantic models for recap input media and settings."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class MediaKind(str, Enum):
    VIDEO = "video"
    IMAGE = "image"


class MediaAssetModel(BaseModel):
    model_config = {"frozen": True}

    url: str
    type: MediaKind
    duration: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None


class RecapSettingsModel(BaseModel):
    model_config = {"frozen": True, "populate_by_name": True}

    title: str = "Unsere Hochzeit"
    duration: float = Field(default=30.0, gt=0, description="Target total duration in seconds")
    resolution: str = Field(
        default="hd", description="preview | mobile | sd | hd | fhd (unknown tokens render as hd)"
    )
    aspect_ratio: Literal["16:9", "9:16", "1:1", "4:5"] = Field(default="16:9", alias="aspectRatio")
    include_videos: bool = Field(default=True, alias="includeVideos")
    include_images: bool = Field(default=True, alias="includeImages")
