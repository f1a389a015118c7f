"""FastAPI dependency injection: Shotstack client factory."""

from __future__ import annotations

from typing import Callable, Optional

from wedding_recap.tools.shotstack import ShotstackClient, create_shotstack_client

ShotstackClientFactory = Callable[[Optional[str]], ShotstackClient]


def get_client_factory() -> ShotstackClientFactory:
    """Return a factory building a client for an optional per-request API key."""
    return create_shotstack_client
