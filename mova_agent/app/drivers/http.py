from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from mova_agent.app.config import safe_error_detail
from mova_agent.app.drivers.base import Driver, DriverContext, DriverPayload, coerce_context
from mova_agent.app.drivers.errors import ConfigurationError, PolicyViolation
from mova_agent.app.drivers.policy import is_url_allowed
from mova_agent.app.observability import structured_log
from mova_agent.app.perf import DriverTimeoutError, elapsed_ms, enforce_timeout

TIMEOUT_STATUS = 408
TRANSPORT_ERROR_STATUS = 0

_BODYLESS_METHODS = ("GET", "HEAD")


@dataclass(frozen=True)
class HttpInput(DriverPayload):
    url: str
    method: str = "GET"
    headers: Optional[Dict[str, str]] = None
    body: Any = None
    kind: str = "http"

    @classmethod
    def coerce(cls, value: Any) -> "HttpInput":
        if isinstance(value, HttpInput):
            return value
        if isinstance(value, Mapping):
            headers = value.get("headers")
            return cls(
                url=str(value.get("url") or value.get("endpoint") or ""),
                method=str(value.get("method") or "GET"),
                headers=dict(headers) if headers else None,
                body=value.get("body"),
            )
        raise ConfigurationError(f"HTTP driver cannot accept {type(value).__name__} input")


@dataclass(frozen=True)
class HttpResult(DriverPayload):
    url: str
    method: str
    status: int
    headers: Dict[str, str]
    body: Any
    ok: bool
    timed_out: bool = False
    error: Optional[str] = None
    duration_ms: int = 0
    kind: str = "http"


def _parse_body(response: httpx.Response) -> Any:
    text = response.text
    if not text:
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


def parse_destination(url: str) -> httpx.URL:
    """Parse a destination URL, rejecting malformed ones as configuration errors."""
    try:
        return httpx.URL(url)
    except (httpx.InvalidURL, TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid destination URL: {safe_error_detail(exc)}") from exc


def build_request_kwargs(method: str, headers: Optional[Mapping[str, str]], body: Any) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {"headers": dict(headers or {})}
    if method in _BODYLESS_METHODS or body is None:
        return kwargs
    if isinstance(body, (str, bytes)):
        kwargs["content"] = body
    else:
        kwargs["content"] = json.dumps(body)
        lowered = {k.lower() for k in kwargs["headers"]}
        if "content-type" not in lowered:
            kwargs["headers"]["Content-Type"] = "application/json"
    return kwargs


class HttpDriver(Driver):
    """
    Single-request HTTP driver.

    The destination origin must match the context allowlist. Remote
    failures, error statuses and timeouts are reported on the HttpResult;
    only a missing url or an allowlist rejection raises.
    """

    name = "http"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    def _client(self, timeout_ms: int) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=httpx.Timeout(timeout_ms / 1000.0))

    async def execute(self, input: Any, context: Optional[DriverContext] = None) -> HttpResult:
        http_input = HttpInput.coerce(input)
        ctx = coerce_context(context)
        url = http_input.url.strip()
        if not url:
            raise ConfigurationError("HTTP driver requires url or endpoint")
        parse_destination(url)

        if not is_url_allowed(url, ctx.allowlist, deny_by_default=ctx.denies_by_default):
            structured_log(
                {"event": "driver.policy_denied", "driver": self.name, "target": url},
                level=logging.WARNING,
            )
            raise PolicyViolation(url, kind="destination")

        method = (http_input.method or "GET").upper()
        timeout_ms = ctx.timeout_ms
        request_kwargs = build_request_kwargs(method, http_input.headers, http_input.body)
        started = time.monotonic()

        async def _send() -> httpx.Response:
            async with self._client(timeout_ms) as client:
                response = await client.request(method, url, **request_kwargs)
                return response

        try:
            response = await enforce_timeout(_send, timeout_ms)
        except (DriverTimeoutError, httpx.TimeoutException) as exc:
            return self._failure(url, method, started, exc, status=TIMEOUT_STATUS, timed_out=True)
        except httpx.HTTPError as exc:
            return self._failure(url, method, started, exc, status=TRANSPORT_ERROR_STATUS)

        result = HttpResult(
            url=url,
            method=method,
            status=response.status_code,
            headers=dict(response.headers),
            body=_parse_body(response),
            ok=response.is_success or response.is_redirect,
            duration_ms=elapsed_ms(started),
        )
        structured_log(
            {
                "event": "driver.execute",
                "driver": self.name,
                "method": method,
                "status": result.status,
                "duration_ms": result.duration_ms,
            }
        )
        return result

    def _failure(
        self,
        url: str,
        method: str,
        started: float,
        exc: Exception,
        *,
        status: int,
        timed_out: bool = False,
    ) -> HttpResult:
        detail = safe_error_detail(exc) or type(exc).__name__
        structured_log(
            {
                "event": "driver.failure",
                "driver": self.name,
                "method": method,
                "timed_out": timed_out,
                "detail": detail,
            },
            level=logging.WARNING,
        )
        return HttpResult(
            url=url,
            method=method,
            status=status,
            headers={},
            body=None,
            ok=False,
            timed_out=timed_out,
            error=detail,
            duration_ms=elapsed_ms(started),
        )


def http_driver_factory(transport: Optional[httpx.AsyncBaseTransport] = None) -> HttpDriver:
    return HttpDriver(transport=transport)


__all__ = [
    "HttpDriver",
    "HttpInput",
    "HttpResult",
    "TIMEOUT_STATUS",
    "TRANSPORT_ERROR_STATUS",
    "build_request_kwargs",
    "http_driver_factory",
    "parse_destination",
]
