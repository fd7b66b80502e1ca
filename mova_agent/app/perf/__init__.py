from .timeouts import DriverTimeoutError, elapsed_ms, enforce_timeout, resolve_timeout_ms

__all__ = ["DriverTimeoutError", "elapsed_ms", "enforce_timeout", "resolve_timeout_ms"]
