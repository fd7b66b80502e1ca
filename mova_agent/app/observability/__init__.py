from __future__ import annotations

from .logging import configure_logging, safe_redact, structured_log

__all__ = [
    "configure_logging",
    "safe_redact",
    "structured_log",
]
