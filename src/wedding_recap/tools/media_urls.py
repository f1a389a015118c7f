"""Media URL fixes applied before URLs are embedded into a render request."""

from __future__ import annotations

# Firebase Storage serves file metadata instead of the file without alt=media
_DOWNLOAD_PARAM_HOSTS: dict[str, str] = {
    "firebasestorage.googleapis.com": "alt=media",
}


def normalize_media_url(url: str) -> str:
    """Rewrite a media URL so the renderer can fetch it.

    Appends the download parameter for storage hosts that need one and
    upgrades ``http://`` to ``https://``. Both rewrites are applied, so the
    result is stable under repeated normalization. Anything else, including
    malformed URLs, is returned unchanged.
    """
    for host, param in _DOWNLOAD_PARAM_HOSTS.items():
        if host in url and param not in url:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{param}"

    if url.startswith("http://"):
        url = "https://" + url[len("http://"):]

    return url
