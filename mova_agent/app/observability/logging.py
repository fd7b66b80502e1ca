from __future__ import annotations

import json
import logging
from logging.config import dictConfig
from typing import Any, Dict, Optional

from mova_agent.app.config import get_settings
from mova_agent.app.config.redaction import redact

logger = logging.getLogger(__name__)


def logging_config(level: str) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "root": {
            "level": level,
            "handlers": ["console"],
        },
    }


def configure_logging(level: Optional[str] = None) -> None:
    dictConfig(logging_config((level or get_settings().log_level).upper()))


def safe_redact(event: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(event, dict):
        return {}
    return redact(event)


def structured_log(event: Dict[str, Any], level: int = logging.INFO) -> None:
    try:
        safe_event = safe_redact(event)
        logger.log(level, json.dumps(safe_event, separators=(",", ":"), default=str))
    except Exception:
        # logging must never break the execution path
        return


__all__ = ["configure_logging", "logging_config", "safe_redact", "structured_log"]
