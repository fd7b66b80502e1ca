"""
Signed webhook delivery (v1).

POSTs a JSON payload with HMAC headers:

    x-mova-ts           ISO-8601 timestamp
    x-mova-body-sha256  sha256 hex of the exact request body
    x-mova-sig          HMAC-SHA256(secret, f"{ts}.{body_sha256}")

Timeouts come back as status 408, transport failures as status 500.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import httpx

from mova_agent.app.config import safe_error_detail
from mova_agent.app.crypto.signing import body_sha256, sign_payload
from mova_agent.app.drivers.base import Driver, DriverContext, DriverPayload, coerce_context
from mova_agent.app.drivers.errors import ConfigurationError, PolicyViolation
from mova_agent.app.drivers.http import parse_destination
from mova_agent.app.drivers.policy import is_url_allowed
from mova_agent.app.observability import structured_log
from mova_agent.app.perf import DriverTimeoutError, elapsed_ms, enforce_timeout, resolve_timeout_ms

DRIVER_VERSION = "http_webhook_delivery_v1"
TIMEOUT_STATUS = 408
TRANSPORT_ERROR_STATUS = 500


@dataclass(frozen=True)
class WebhookDeliveryInput(DriverPayload):
    target_url: str
    payload: Any
    signing_secret: str
    timeout_ms: Optional[int] = None
    kind: str = "webhook_delivery"

    @classmethod
    def coerce(cls, value: Any) -> "WebhookDeliveryInput":
        if isinstance(value, WebhookDeliveryInput):
            return value
        if isinstance(value, Mapping):
            return cls(
                target_url=str(value.get("target_url") or ""),
                payload=value.get("payload"),
                signing_secret=str(value.get("signing_secret") or ""),
                timeout_ms=value.get("timeout_ms"),
            )
        raise ConfigurationError(f"Webhook delivery driver cannot accept {type(value).__name__} input")


@dataclass(frozen=True)
class WebhookDeliveryResult(DriverPayload):
    status: int
    duration_ms: int
    signature: Dict[str, str]
    response_body: Optional[str] = None
    response_body_sha256: Optional[str] = None
    kind: str = "webhook_delivery"

    @property
    def delivered(self) -> bool:
        return 200 <= self.status < 300


def serialize_payload(payload: Any) -> str:
    return json.dumps(payload if payload is not None else {}, separators=(",", ":"), ensure_ascii=False)


class HttpWebhookDeliveryDriver(Driver):
    name = DRIVER_VERSION

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self._transport = transport

    async def execute(self, input: Any, context: Optional[DriverContext] = None) -> WebhookDeliveryResult:
        delivery = WebhookDeliveryInput.coerce(input)
        ctx = coerce_context(context)
        target_url = delivery.target_url.strip()
        if not target_url:
            raise ConfigurationError("Webhook delivery driver requires target_url")
        parse_destination(target_url)
        if not delivery.signing_secret:
            raise ConfigurationError("Webhook delivery driver requires signing_secret")

        if not is_url_allowed(target_url, ctx.allowlist, deny_by_default=ctx.denies_by_default):
            structured_log(
                {"event": "driver.policy_denied", "driver": self.name, "target": target_url},
                level=logging.WARNING,
            )
            raise PolicyViolation(target_url, kind="destination")

        timeout_ms = resolve_timeout_ms(delivery.timeout_ms, ctx.timeout_ms)
        body = serialize_payload(delivery.payload)
        signed = sign_payload(body, delivery.signing_secret)
        headers = {"content-type": "application/json", **signed.as_headers()}
        started = time.monotonic()

        async def _post() -> httpx.Response:
            async with httpx.AsyncClient(
                transport=self._transport,
                timeout=httpx.Timeout(timeout_ms / 1000.0),
            ) as client:
                return await client.post(target_url, content=body.encode("utf-8"), headers=headers)

        try:
            response = await enforce_timeout(_post, timeout_ms)
        except (DriverTimeoutError, httpx.TimeoutException) as exc:
            return self._failure(started, signed.as_dict(), exc, status=TIMEOUT_STATUS, body="timeout")
        except httpx.HTTPError as exc:
            return self._failure(started, signed.as_dict(), exc, status=TRANSPORT_ERROR_STATUS)

        response_body = response.text
        result = WebhookDeliveryResult(
            status=response.status_code,
            duration_ms=elapsed_ms(started),
            signature=signed.as_dict(),
            response_body=response_body or None,
            response_body_sha256=body_sha256(response_body) if response_body else None,
        )
        structured_log(
            {
                "event": "driver.execute",
                "driver": self.name,
                "status": result.status,
                "duration_ms": result.duration_ms,
            }
        )
        return result

    def _failure(
        self,
        started: float,
        signature: Dict[str, str],
        exc: Exception,
        *,
        status: int,
        body: Optional[str] = None,
    ) -> WebhookDeliveryResult:
        detail = safe_error_detail(exc) or type(exc).__name__
        structured_log(
            {"event": "driver.failure", "driver": self.name, "status": status, "detail": detail},
            level=logging.WARNING,
        )
        return WebhookDeliveryResult(
            status=status,
            duration_ms=elapsed_ms(started),
            signature=signature,
            response_body=body or detail,
        )


def http_webhook_delivery_driver_factory(
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> HttpWebhookDeliveryDriver:
    return HttpWebhookDeliveryDriver(transport=transport)


__all__ = [
    "DRIVER_VERSION",
    "HttpWebhookDeliveryDriver",
    "WebhookDeliveryInput",
    "WebhookDeliveryResult",
    "http_webhook_delivery_driver_factory",
    "serialize_payload",
]
