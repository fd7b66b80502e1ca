from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, TypeVar

from mova_agent.app.config import DEFAULT_TIMEOUT_MS

T = TypeVar("T")


class DriverTimeoutError(TimeoutError):
    """Raised when an external operation exceeds its time budget."""

    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"operation exceeded {timeout_ms} ms")
        self.timeout_ms = timeout_ms


def resolve_timeout_ms(value: Any, default: int = DEFAULT_TIMEOUT_MS) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        v = int(value)
    except (TypeError, ValueError):
        return default
    return v if v > 0 else default


def elapsed_ms(start_ts: float) -> int:
    return int((time.monotonic() - start_ts) * 1000)


async def enforce_timeout(
    coro_fn: Callable[[], Awaitable[T]],
    timeout_ms: int,
) -> T:
    """Race ``coro_fn()`` against a timer; the operation is cancelled if the timer wins."""
    try:
        return await asyncio.wait_for(coro_fn(), timeout=timeout_ms / 1000.0)
    except asyncio.TimeoutError as exc:  # noqa: PERF203
        raise DriverTimeoutError(timeout_ms) from exc


__all__ = ["DriverTimeoutError", "elapsed_ms", "enforce_timeout", "resolve_timeout_ms"]
