"""Pydantic models for the Shotstack render payload and render job snapshots."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from wedding_recap.errors import RecapErrorKind


class TransitionModel(BaseModel):
    model_config = {"populate_by_name": True}

    in_: str = Field(default="fade", alias="in")
    out: str = "fade"


class VideoAssetModel(BaseModel):
    type: Literal["video"] = "video"
    src: str
    trim: float = 1.0  # skip the first second of every video


class ImageAssetModel(BaseModel):
    type: Literal["image"] = "image"
    src: str


class TitleAssetModel(BaseModel):
    type: Literal["title"] = "title"
    text: str
    style: str = "minimal"
    color: str = "#ffffff"
    size: str = "large"
    background: str = "rgba(0,0,0,0.7)"
    position: str = "center"


class ClipModel(BaseModel):
    asset: Union[VideoAssetModel, ImageAssetModel, TitleAssetModel]
    start: float = Field(ge=0)
    length: float = Field(gt=0)
    transition: TransitionModel = Field(default_factory=TransitionModel)


class TrackModel(BaseModel):
    clips: list[ClipModel]


class TimelineModel(BaseModel):
    background: str = "#000000"
    tracks: list[TrackModel]

    @property
    def main_track(self) -> TrackModel:
        return self.tracks[0]

    @property
    def title_track(self) -> TrackModel:
        return self.tracks[1]


class OutputModel(BaseModel):
    model_config = {"populate_by_name": True}

    format: str = "mp4"
    resolution: str = "hd"
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    fps: int = 25
    quality: str = "medium"


class RenderRequestModel(BaseModel):
    timeline: TimelineModel
    output: OutputModel

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body expected by ``POST /render``."""
        return self.model_dump(by_alias=True, exclude_none=True)


class RenderStatus(str, Enum):
    QUEUED = "queued"
    FETCHING = "fetching"
    RENDERING = "rendering"
    SAVING = "saving"
    DONE = "done"
    FAILED = "failed"


class RenderProgressModel(BaseModel):
    """One observed snapshot of a remote render job.

    ``error_kind`` is only set when the status query itself failed; the
    snapshot then reports ``failed`` with progress 0 although the remote job
    may still be running.
    """

    status: RenderStatus = RenderStatus.QUEUED
    progress: float = 0.0
    url: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[RecapErrorKind] = None

    @property
    def is_check_failure(self) -> bool:
        return self.error_kind is not None

    @property
    def is_done(self) -> bool:
        return self.status is RenderStatus.DONE and bool(self.url)

    @property
    def is_remote_failure(self) -> bool:
        return self.status is RenderStatus.FAILED and not self.is_check_failure


class RenderResultModel(BaseModel):
    success: bool
    render_id: Optional[str] = None
    error_kind: Optional[RecapErrorKind] = None
    error: Optional[str] = None  # short localized message
    details: Optional[str] = None
