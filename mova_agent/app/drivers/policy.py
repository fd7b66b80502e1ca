"""
Allowlist predicates.

An empty or absent allowlist is permissive unless ``deny_by_default`` is
set. Matching is case-sensitive; no globbing, no regex.
"""

from __future__ import annotations

from typing import Optional, Sequence

import httpx


def _empty_allowlist_result(allowlist: Optional[Sequence[str]], deny_by_default: bool) -> Optional[bool]:
    if not allowlist:
        return not deny_by_default
    return None


def is_allowed(
    target: str,
    allowlist: Optional[Sequence[str]] = None,
    *,
    deny_by_default: bool = False,
) -> bool:
    """True iff some allowlist entry is a prefix of the trimmed target."""
    empty = _empty_allowlist_result(allowlist, deny_by_default)
    if empty is not None:
        return empty
    trimmed = (target or "").strip()
    return any(trimmed.startswith(entry) for entry in allowlist)


def _origin_matches(url: httpx.URL, entry: str) -> bool:
    try:
        allowed = httpx.URL(entry.strip())
    except (httpx.InvalidURL, TypeError, ValueError):
        return False
    if not allowed.scheme or not allowed.host:
        return False
    if url.scheme != allowed.scheme or url.host != allowed.host:
        return False
    if allowed.port is not None and url.port != allowed.port:
        return False
    allowed_path = allowed.path or "/"
    if allowed_path == "/":
        return True
    # whole path segments only: /hooks admits /hooks/x, not /hooksevil
    return url.path == allowed_path or url.path.startswith(allowed_path.rstrip("/") + "/")


def is_url_allowed(
    url: str,
    allowlist: Optional[Sequence[str]] = None,
    *,
    deny_by_default: bool = False,
) -> bool:
    """True iff the url's origin (scheme, host, optional port, optional path prefix) matches an entry."""
    empty = _empty_allowlist_result(allowlist, deny_by_default)
    if empty is not None:
        return empty
    try:
        parsed = httpx.URL((url or "").strip())
    except (httpx.InvalidURL, TypeError, ValueError):
        return False
    if not parsed.scheme or not parsed.host:
        return False
    return any(_origin_matches(parsed, entry) for entry in allowlist)


__all__ = ["is_allowed", "is_url_allowed"]
