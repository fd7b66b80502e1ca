from __future__ import annotations

import re
from typing import Any, Mapping

REDACTED = "[redacted]"

# Substring match against lower-cased mapping keys.
_SENSITIVE_KEY_MARKERS = ("password", "secret", "token", "key", "auth", "cookie", "credential")

_API_KEY_PATTERN = re.compile(r"(?<![A-Za-z0-9])sk-[A-Za-z0-9_-]{8,}", re.IGNORECASE)
_BEARER_PATTERN = re.compile(r"(Bearer\s+)(?!\[redacted\])[^\s\"',;]+", re.IGNORECASE)
_ASSIGNMENT_PATTERN = re.compile(
    r"((?:password|passwd|secret|token|api_key|apikey|access_key)\s*[=:]\s*)(?!\[redacted\])[^\s&\"',;]+",
    re.IGNORECASE,
)

MAX_ERROR_DETAIL_CHARS = 200


def is_sensitive_key(key: Any) -> bool:
    lowered = str(key).lower()
    return any(marker in lowered for marker in _SENSITIVE_KEY_MARKERS)


def redact_secrets(s: str) -> str:
    """Mask secret-looking fragments inside free text, keeping the rest."""
    if not s:
        return s
    redacted = _API_KEY_PATTERN.sub(REDACTED, s)
    redacted = _BEARER_PATTERN.sub(r"\1" + REDACTED, redacted)
    redacted = _ASSIGNMENT_PATTERN.sub(r"\1" + REDACTED, redacted)
    return redacted


def redact(value: Any) -> Any:
    """
    Return a copy of ``value`` with sensitive data masked.

    Mapping entries whose key looks sensitive are replaced wholesale by
    ``REDACTED``; strings elsewhere have secret-looking fragments masked in
    place. Lists and tuples are walked recursively, everything else is
    returned untouched. The input is never mutated and the transform is
    idempotent.
    """
    if isinstance(value, Mapping):
        out = {}
        for k, v in value.items():
            out[k] = REDACTED if is_sensitive_key(k) else redact(v)
        return out
    if isinstance(value, list):
        return [redact(v) for v in value]
    if isinstance(value, tuple):
        return tuple(redact(v) for v in value)
    if isinstance(value, str):
        return redact_secrets(value)
    return value


def safe_error_detail(exc: BaseException) -> str:
    text = redact_secrets(str(exc))
    return text[:MAX_ERROR_DETAIL_CHARS]


__all__ = [
    "REDACTED",
    "is_sensitive_key",
    "redact",
    "redact_secrets",
    "safe_error_detail",
]
