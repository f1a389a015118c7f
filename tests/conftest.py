"""Shared fixtures: sample media and a scripted Shotstack API."""

from __future__ import annotations

import json
from typing import Union

import httpx
import pytest

from wedding_recap.models.media import MediaAssetModel, MediaKind, RecapSettingsModel
from wedding_recap.tools.shotstack import ShotstackClient

ScriptedReply = Union[httpx.Response, Exception]


def render_status_body(status: str, progress: float = 0, url: str | None = None, error: str | None = None) -> dict:
    data: dict = {"progress": progress}
    if error is not None:
        data["error"] = error
    response: dict = {"id": "render-123", "status": status, "data": data}
    if url is not None:
        response["url"] = url
    return {"success": True, "message": "OK", "response": response}


class FakeShotstack:
    """Shotstack API double served through ``httpx.MockTransport``.

    ``render_reply`` answers ``POST /render``; ``status_replies`` answer
    ``GET /render/{id}`` in order, the last one repeating.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.render_reply: ScriptedReply = httpx.Response(
            201,
            json={
                "success": True,
                "message": "Created",
                "response": {"message": "Render Successfully Queued", "id": "render-123"},
            },
        )
        self.status_replies: list[ScriptedReply] = [
            httpx.Response(200, json=render_status_body("done", 100, "https://cdn.example/recap.mp4"))
        ]
        self.probe_reply: ScriptedReply = httpx.Response(
            200, json={"success": True, "response": {"metadata": {"streams": [{"codec_type": "video"}]}}}
        )
        self._status_calls = 0

    @property
    def status_calls(self) -> int:
        return self._status_calls

    @property
    def render_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST" and r.url.path.endswith("/render")]

    def last_render_payload(self) -> dict:
        return json.loads(self.render_calls[-1].content)

    def _reply(self, reply: ScriptedReply) -> httpx.Response:
        if isinstance(reply, Exception):
            raise reply
        return reply

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path.endswith("/render"):
            return self._reply(self.render_reply)
        if request.method == "GET" and path.endswith("/probe"):
            return self._reply(self.probe_reply)
        if request.method == "GET" and "/render/" in path:
            index = min(self._status_calls, len(self.status_replies) - 1)
            self._status_calls += 1
            return self._reply(self.status_replies[index])
        return httpx.Response(404, json={"message": "Not found"})

    def client(self, api_key: str = "test-key", **kwargs) -> ShotstackClient:
        kwargs.setdefault("poll_interval", 0)
        return ShotstackClient(api_key, "stage", transport=httpx.MockTransport(self.handler), **kwargs)


@pytest.fixture
def fake_shotstack() -> FakeShotstack:
    return FakeShotstack()


@pytest.fixture
def video_asset() -> MediaAssetModel:
    return MediaAssetModel(url="https://media.example/first-dance.mp4", type=MediaKind.VIDEO)


@pytest.fixture
def image_asset() -> MediaAssetModel:
    return MediaAssetModel(url="https://media.example/rings.jpg", type=MediaKind.IMAGE)


@pytest.fixture
def mixed_assets(video_asset, image_asset) -> list[MediaAssetModel]:
    second_video = MediaAssetModel(url="https://media.example/speech.mp4", type=MediaKind.VIDEO)
    return [video_asset, image_asset, second_video]


@pytest.fixture
def recap_settings() -> RecapSettingsModel:
    return RecapSettingsModel(title="Anna & Ben", duration=30, resolution="hd")


@pytest.fixture
def status_body():
    return render_status_body
