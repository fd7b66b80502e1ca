from .settings import (
    DEFAULT_TIMEOUT_MS,
    Settings,
    get_settings,
    settings_public_summary,
)
from .redaction import REDACTED, redact, redact_secrets, safe_error_detail

__all__ = [
    "DEFAULT_TIMEOUT_MS",
    "Settings",
    "get_settings",
    "settings_public_summary",
    "REDACTED",
    "redact",
    "redact_secrets",
    "safe_error_detail",
]
