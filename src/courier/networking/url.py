"""URL helpers for request dispatch."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import urlsplit


def build_url(url: str | None, params: Mapping[str, Any] | None) -> str:
    """Append a query string built from ``params`` to ``url``.

    Keys are emitted in insertion order as ``key=value`` joined by ``&``.
    An empty mapping still appends the ``?`` separator.
    Values are not URL-encoded; callers pre-encode reserved characters.
    """
    url = url or ""
    if params is None:
        return url
    query = "&".join(f"{key}={value}" for key, value in params.items())
    return f"{url}?{query}"


def join_base_url(base_url: str | None, url: str | None) -> str:
    """Resolve a relative ``url`` against ``base_url``.

    Absolute URLs, and any URL when no base is configured, are returned
    as is.
    """
    url = url or ""
    if not base_url or urlsplit(url).scheme:
        return url
    if not url:
        return base_url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"
