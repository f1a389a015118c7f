"""Clip timeline builder: turns recap media into a Shotstack timeline."""

from __future__ import annotations

import structlog

from wedding_recap.errors import RecapError, RecapErrorKind
from wedding_recap.models.media import MediaAssetModel, MediaKind, RecapSettingsModel
from wedding_recap.models.render import (
    ClipModel,
    ImageAssetModel,
    OutputModel,
    RenderRequestModel,
    TimelineModel,
    TitleAssetModel,
    TrackModel,
    VideoAssetModel,
)
from wedding_recap.tools.media_urls import normalize_media_url

logger = structlog.get_logger()

MIN_CLIP_DURATION_SEC = 2.0
TITLE_DURATION_SEC = 3.0
TIMELINE_BACKGROUND = "#000000"

# recap resolution token → Shotstack output resolution
_RESOLUTION_MAP: dict[str, str] = {
    "preview": "preview",
    "mobile": "mobile",
    "sd": "sd",
    "hd": "hd",
    "fhd": "1080",
}
_DEFAULT_RESOLUTION = "hd"


def map_resolution(resolution: str) -> str:
    return _RESOLUTION_MAP.get(resolution, _DEFAULT_RESOLUTION)


def filter_eligible_media(
    assets: list[MediaAssetModel], settings: RecapSettingsModel
) -> list[MediaAssetModel]:
    """Keep assets allowed by the include flags, preserving input order."""
    return [
        asset
        for asset in assets
        if (asset.type is MediaKind.VIDEO and settings.include_videos)
        or (asset.type is MediaKind.IMAGE and settings.include_images)
    ]


def clip_duration(total_duration: float, clip_count: int) -> float:
    return max(MIN_CLIP_DURATION_SEC, total_duration / clip_count)


def build_media_clips(assets: list[MediaAssetModel], duration: float) -> list[ClipModel]:
    """Lay out one clip per asset back-to-back from offset 0."""
    clips: list[ClipModel] = []
    current_start = 0.0

    for asset in assets:
        src = normalize_media_url(asset.url)
        if asset.type is MediaKind.VIDEO:
            clip_asset = VideoAssetModel(src=src)
        else:
            clip_asset = ImageAssetModel(src=src)

        clips.append(ClipModel(asset=clip_asset, start=current_start, length=duration))
        current_start += duration

    return clips


def build_title_clip(title: str) -> ClipModel:
    return ClipModel(asset=TitleAssetModel(text=title), start=0, length=TITLE_DURATION_SEC)


def build_timeline(
    assets: list[MediaAssetModel], settings: RecapSettingsModel
) -> TimelineModel:
    """Build the two-track recap timeline.

    Track 0 holds the media clips, track 1 the title overlay.

    Raises:
        RecapError: ``empty_input`` when no assets are given,
            ``no_eligible_media`` when the include flags filter out every asset.
    """
    if not assets:
        raise RecapError(RecapErrorKind.EMPTY_INPUT)

    eligible = filter_eligible_media(assets, settings)
    if not eligible:
        raise RecapError(RecapErrorKind.NO_ELIGIBLE_MEDIA)

    duration = clip_duration(settings.duration, len(eligible))

    logger.debug(
        "timeline.build",
        media_count=len(eligible),
        dropped=len(assets) - len(eligible),
        clip_duration=round(duration, 2),
    )

    return TimelineModel(
        background=TIMELINE_BACKGROUND,
        tracks=[
            TrackModel(clips=build_media_clips(eligible, duration)),
            TrackModel(clips=[build_title_clip(settings.title)]),
        ],
    )


def build_output(settings: RecapSettingsModel) -> OutputModel:
    return OutputModel(
        format="mp4",
        resolution=map_resolution(settings.resolution),
        aspect_ratio=settings.aspect_ratio,
        fps=25,
        quality="medium",
    )


def build_render_request(
    assets: list[MediaAssetModel], settings: RecapSettingsModel
) -> RenderRequestModel:
    return RenderRequestModel(
        timeline=build_timeline(assets, settings),
        output=build_output(settings),
    )
