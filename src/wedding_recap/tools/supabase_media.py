"""Supabase media library: loads guest uploads as recap input."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

import structlog
from supabase import create_client

from wedding_recap.config import settings
from wedding_recap.models.media import MediaAssetModel, MediaKind

logger = structlog.get_logger()

_RECAP_KINDS = {kind.value for kind in MediaKind}


def convert_media_items(items: Iterable[dict[str, Any]]) -> list[MediaAssetModel]:
    """Convert media rows to recap assets.

    Only ``video`` and ``image`` rows are kept; notes and rows without a URL
    are dropped. Order is preserved.
    """
    assets: list[MediaAssetModel] = []
    for item in items:
        if item.get("type") not in _RECAP_KINDS or not item.get("url"):
            continue
        assets.append(
            MediaAssetModel(
                url=item["url"],
                type=item["type"],
                duration=item.get("duration"),
            )
        )
    return assets


def _get_supabase_client():
    """Create a Supabase client using service_role key."""
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError("Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


def _fetch_media_rows_sync() -> list[dict[str, Any]]:
    """Fetch media rows, newest first (sync, runs in thread pool)."""
    client = _get_supabase_client()
    response = (
        client.table(settings.supabase_media_table)
        .select("*")
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


async def fetch_media_assets() -> list[MediaAssetModel]:
    """Load the media library from Supabase as recap assets.

    Runs sync Supabase SDK calls in a thread pool to avoid blocking the event loop.
    """
    rows = await asyncio.to_thread(_fetch_media_rows_sync)
    assets = convert_media_items(rows)
    logger.info(
        "supabase.media.fetched",
        table=settings.supabase_media_table,
        rows=len(rows),
        assets=len(assets),
    )
    return assets
