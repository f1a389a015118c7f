"""Shotstack render API client: recap submission and completion polling.

Docs: https://shotstack.io/docs/api/
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator, Callable
from contextlib import aclosing
from typing import Any, Optional

import httpx
import structlog

from wedding_recap.config import settings
from wedding_recap.errors import RecapError, RecapErrorKind
from wedding_recap.models.media import MediaAssetModel, RecapSettingsModel
from wedding_recap.models.render import (
    RenderProgressModel,
    RenderResultModel,
    RenderStatus,
)
from wedding_recap.tools.media_urls import normalize_media_url
from wedding_recap.tools.timeline import build_render_request

logger = structlog.get_logger()

SHOTSTACK_BASE_URLS: dict[str, str] = {
    "stage": "https://api.shotstack.io/stage",
    "v1": "https://api.shotstack.io/v1",
}

_STATUS_ERROR_KINDS: dict[int, RecapErrorKind] = {
    400: RecapErrorKind.BAD_REQUEST,
    401: RecapErrorKind.UNAUTHORIZED,
    429: RecapErrorKind.RATE_LIMITED,
}


def _remote_message(response: httpx.Response) -> str | None:
    """Return the human-readable ``message`` of a Shotstack error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message
    return None


def classify_error(exc: Exception) -> RecapError:
    """Map a transport or decoding failure onto the recap error taxonomy."""
    if isinstance(exc, RecapError):
        return exc
    if isinstance(exc, httpx.TimeoutException):
        return RecapError(RecapErrorKind.REQUEST_TIMEOUT)
    if isinstance(exc, httpx.HTTPStatusError):
        kind = _STATUS_ERROR_KINDS.get(exc.response.status_code, RecapErrorKind.UNKNOWN_ERROR)
        details = _remote_message(exc.response)
        if details is None and kind is RecapErrorKind.UNKNOWN_ERROR:
            details = f"Shotstack antwortete mit HTTP {exc.response.status_code}"
        return RecapError(kind, details)
    if isinstance(exc, httpx.HTTPError):
        return RecapError(RecapErrorKind.UNKNOWN_ERROR, str(exc) or None)
    if isinstance(exc, ValueError):
        return RecapError(
            RecapErrorKind.MALFORMED_RESPONSE, "Shotstack lieferte eine unerwartete Antwort"
        )
    return RecapError(RecapErrorKind.UNKNOWN_ERROR, str(exc) or None)


def _response_section(body: Any) -> dict[str, Any]:
    """Return the ``response`` object wrapped by every Shotstack success body."""
    section = body.get("response") if isinstance(body, dict) else None
    return section if isinstance(section, dict) else {}


def _parse_status(raw: Any) -> RenderStatus:
    if not raw:
        return RenderStatus.QUEUED
    try:
        return RenderStatus(raw)
    except ValueError:
        logger.warning("shotstack.status.unknown", status=raw)
        return RenderStatus.QUEUED


class ShotstackClient:
    """Async client for the Shotstack ``/render`` resource.

    Every call opens its own ``httpx.AsyncClient`` and releases the connection
    when the response is read. Submission and status queries never raise;
    only :meth:`wait_for_completion` (and :meth:`iter_render_progress`) raise
    :class:`RecapError` for terminal outcomes.
    """

    def __init__(
        self,
        api_key: str,
        environment: str = "stage",
        *,
        request_timeout: Optional[float] = None,
        status_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if environment not in SHOTSTACK_BASE_URLS:
            raise ValueError(
                f"Unknown Shotstack environment {environment!r} "
                f"(expected one of {sorted(SHOTSTACK_BASE_URLS)})"
            )
        self.api_key = api_key
        self.environment = environment
        self.base_url = SHOTSTACK_BASE_URLS[environment]
        self.request_timeout = (
            settings.shotstack_request_timeout_sec if request_timeout is None else request_timeout
        )
        self.status_timeout = (
            settings.shotstack_status_timeout_sec if status_timeout is None else status_timeout
        )
        self.poll_interval = (
            settings.recap_poll_interval_sec if poll_interval is None else poll_interval
        )
        self.max_attempts = (
            settings.recap_poll_max_attempts if max_attempts is None else max_attempts
        )
        self._transport = transport

    def __repr__(self) -> str:
        return f"ShotstackClient(environment={self.environment!r}, base_url={self.base_url!r})"

    def _http_client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"x-api-key": self.api_key},
            timeout=timeout,
            transport=self._transport,
        )

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def create_recap(
        self, assets: list[MediaAssetModel], recap_settings: RecapSettingsModel
    ) -> RenderResultModel:
        """Submit a recap render and return its job id.

        Validation (credential, media) happens before any request is sent.
        Exactly one ``POST /render`` is issued per call; there is no retry.
        """
        try:
            if not self.api_key or not self.api_key.strip():
                raise RecapError(RecapErrorKind.MISSING_CREDENTIAL)

            render_request = build_render_request(assets, recap_settings)

            logger.info(
                "shotstack.submit.start",
                environment=self.environment,
                media_count=len(render_request.timeline.main_track.clips),
                duration=recap_settings.duration,
                clip_duration=round(render_request.timeline.main_track.clips[0].length, 1),
                resolution=render_request.output.resolution,
            )

            async with self._http_client(self.request_timeout) as client:
                resp = await client.post("/render", json=render_request.to_payload())
                if not resp.is_success:
                    logger.error(
                        "shotstack.submit.api_error",
                        status_code=resp.status_code,
                        response_body=resp.text[:500],
                    )
                    resp.raise_for_status()
                data = resp.json()

            render_id = _response_section(data).get("id")
            if not isinstance(render_id, str) or not render_id:
                raise RecapError(RecapErrorKind.MALFORMED_RESPONSE)

        except (RecapError, httpx.HTTPError, ValueError) as exc:
            error = classify_error(exc)
            logger.warning(
                "shotstack.submit.failed", error_kind=error.kind.value, details=error.details
            )
            return RenderResultModel(
                success=False,
                error_kind=error.kind,
                error=error.message,
                details=error.details,
            )

        logger.info("shotstack.submit.queued", render_id=render_id)
        return RenderResultModel(success=True, render_id=render_id)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    async def check_render_progress(self, render_id: str) -> RenderProgressModel:
        """Query ``GET /render/{id}`` once.

        A failed query is reported as a ``failed`` snapshot with progress 0
        and ``error_kind`` set, never raised.
        """
        try:
            async with self._http_client(self.status_timeout) as client:
                resp = await client.get(f"/render/{render_id}")
                resp.raise_for_status()
                body = resp.json()

            data = _response_section(body)
            job_data = data.get("data") if isinstance(data.get("data"), dict) else {}
            # unexpected field types raise pydantic.ValidationError, a ValueError
            return RenderProgressModel(
                status=_parse_status(data.get("status")),
                progress=job_data.get("progress") or 0,
                url=data.get("url") or None,
                error=job_data.get("error") or data.get("error") or None,
            )
        except (httpx.HTTPError, ValueError) as exc:
            error = classify_error(exc)
            logger.warning(
                "shotstack.status.check_failed",
                render_id=render_id,
                error_kind=error.kind.value,
                details=error.details,
            )
            return RenderProgressModel(
                status=RenderStatus.FAILED,
                progress=0,
                error=error.details,
                error_kind=error.kind,
            )

    # ------------------------------------------------------------------
    # Completion polling
    # ------------------------------------------------------------------

    async def _wait_between_attempts(self, cancel_event: Optional[asyncio.Event]) -> bool:
        """Sleep one poll interval. Returns True when cancelled meanwhile."""
        if cancel_event is None:
            await asyncio.sleep(self.poll_interval)
            return False
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            return False
        return True

    async def iter_render_progress(
        self,
        render_id: str,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AsyncIterator[RenderProgressModel]:
        """Yield status snapshots until the job reaches a terminal state.

        Stops after yielding a ``done`` snapshot that carries a URL, or a
        remote ``failed`` snapshot. Failed status queries are yielded and
        polling goes on.

        Raises:
            RecapError: ``poll_timeout`` once ``max_attempts`` queries passed
                without a terminal state, ``cancelled`` when *cancel_event*
                is set.
        """
        for attempt in range(1, self.max_attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise RecapError(RecapErrorKind.CANCELLED)

            progress = await self.check_render_progress(render_id)
            yield progress

            if progress.is_done or progress.is_remote_failure:
                return

            if progress.is_check_failure:
                logger.warning("shotstack.poll.check_failed", render_id=render_id, attempt=attempt)

            if attempt < self.max_attempts:
                if await self._wait_between_attempts(cancel_event):
                    logger.info("shotstack.poll.cancelled", render_id=render_id, attempt=attempt)
                    raise RecapError(RecapErrorKind.CANCELLED)

        logger.error("shotstack.poll.timeout", render_id=render_id, attempts=self.max_attempts)
        raise RecapError(RecapErrorKind.POLL_TIMEOUT)

    async def wait_for_completion(
        self,
        render_id: str,
        on_progress: Optional[Callable[[RenderProgressModel], Any]] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> str:
        """Poll until the render is done and return the video URL.

        *on_progress* receives every snapshot, including the synthesized
        ``failed`` snapshots of status queries that did not get through.

        Raises:
            RecapError: ``remote_failure`` with the remote error text,
                ``poll_timeout`` or ``cancelled``.
        """
        async with aclosing(self.iter_render_progress(render_id, cancel_event)) as snapshots:
            async for progress in snapshots:
                if on_progress is not None:
                    result = on_progress(progress)
                    if inspect.isawaitable(result):
                        await result

                if progress.is_done:
                    logger.info("shotstack.poll.done", render_id=render_id, url=progress.url)
                    return progress.url

                if progress.is_remote_failure:
                    logger.error(
                        "shotstack.poll.render_failed", render_id=render_id, error=progress.error
                    )
                    raise RecapError(RecapErrorKind.REMOTE_FAILURE, progress.error)

        # iter_render_progress only ends after a terminal snapshot or by raising
        raise RecapError(RecapErrorKind.UNKNOWN_ERROR)

    # ------------------------------------------------------------------
    # Probe
    # ------------------------------------------------------------------

    async def probe_media(self, url: str) -> Optional[dict[str, Any]]:
        """Inspect a media file through ``GET /probe``. Returns None on failure."""
        try:
            async with self._http_client(self.status_timeout) as client:
                resp = await client.get("/probe", params={"url": normalize_media_url(url)})
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError):
            logger.warning("shotstack.probe.failed", url=url, exc_info=True)
            return None

        return _response_section(body).get("metadata")


def create_shotstack_client(api_key: Optional[str] = None, **kwargs: Any) -> ShotstackClient:
    """Build a client from settings; *api_key* overrides the configured key."""
    return ShotstackClient(
        settings.shotstack_api_key if api_key is None else api_key,
        settings.shotstack_environment,
        **kwargs,
    )
