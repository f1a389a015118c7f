"""FastAPI route handlers for recap rendering."""

from __future__ import annotations

from contextlib import aclosing

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from wedding_recap.api.dependencies import ShotstackClientFactory, get_client_factory
from wedding_recap.api.schemas import RecapCreateRequest, RecapStatusResponse
from wedding_recap.errors import RecapError, RecapErrorKind
from wedding_recap.models.render import RenderResultModel
from wedding_recap.tools.supabase_media import fetch_media_assets

logger = structlog.get_logger()

router = APIRouter(prefix="/api/v1/recap")

_HTTP_STATUS_BY_KIND: dict[RecapErrorKind, int] = {
    RecapErrorKind.MISSING_CREDENTIAL: 400,
    RecapErrorKind.BAD_REQUEST: 400,
    RecapErrorKind.EMPTY_INPUT: 422,
    RecapErrorKind.NO_ELIGIBLE_MEDIA: 422,
    RecapErrorKind.UNAUTHORIZED: 401,
    RecapErrorKind.RATE_LIMITED: 429,
    RecapErrorKind.REQUEST_TIMEOUT: 504,
}


@router.post("", response_model=RenderResultModel, status_code=201)
async def create_recap(
    request: RecapCreateRequest,
    client_factory: ShotstackClientFactory = Depends(get_client_factory),
):
    """Submit a recap render and return the Shotstack render id."""
    media = request.media
    if request.use_media_library:
        try:
            media = await fetch_media_assets()
        except Exception:
            logger.exception("recap.media_library_failed")
            raise HTTPException(status_code=503, detail="Media library unavailable")

    client = client_factory(request.api_key)
    result = await client.create_recap(media, request.settings)

    if not result.success:
        status_code = _HTTP_STATUS_BY_KIND.get(result.error_kind, 502)
        raise HTTPException(status_code=status_code, detail=result.model_dump(mode="json"))

    logger.info("recap.submitted", render_id=result.render_id, media_count=len(media))
    return result


@router.get("/{render_id}", response_model=RecapStatusResponse)
async def get_recap_status(
    render_id: str,
    client_factory: ShotstackClientFactory = Depends(get_client_factory),
):
    """Get one status snapshot of a recap render."""
    progress = await client_factory(None).check_render_progress(render_id)
    return RecapStatusResponse(
        render_id=render_id,
        status=progress.status,
        progress=progress.progress,
        url=progress.url,
        error=progress.error,
    )


@router.get("/{render_id}/stream")
async def stream_recap_progress(
    render_id: str,
    request: Request,
    client_factory: ShotstackClientFactory = Depends(get_client_factory),
):
    """SSE endpoint for render progress until the video is ready."""
    client = client_factory(None)

    async def event_generator():
        try:
            async with aclosing(client.iter_render_progress(render_id)) as snapshots:
                async for progress in snapshots:
                    if await request.is_disconnected():
                        logger.info("recap.stream.disconnected", render_id=render_id)
                        return
                    yield {"event": "progress", "data": progress.model_dump_json()}
                    if progress.is_done:
                        yield {"event": "done", "data": progress.url}
                    elif progress.is_remote_failure:
                        error = RecapError(RecapErrorKind.REMOTE_FAILURE, progress.error)
                        yield {"event": "error", "data": _error_json(error)}
        except RecapError as exc:
            yield {"event": "error", "data": _error_json(exc)}

    return EventSourceResponse(event_generator())


def _error_json(error: RecapError) -> str:
    return RenderResultModel(
        success=False, error_kind=error.kind, error=error.message, details=error.details
    ).model_dump_json()
