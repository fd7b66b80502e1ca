from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from mova_agent.app.crypto.signing import utc_timestamp
from mova_agent.app.drivers.base import Driver, DriverContext, DriverPayload
from mova_agent.app.drivers.errors import ConfigurationError


@dataclass(frozen=True)
class NoopDeliveryInput(DriverPayload):
    target: str
    payload: Any = None
    dry_run: bool = True
    metadata: Optional[Dict[str, Any]] = None
    kind: str = "noop_delivery"

    @classmethod
    def coerce(cls, value: Any) -> "NoopDeliveryInput":
        if isinstance(value, NoopDeliveryInput):
            return value
        if isinstance(value, Mapping):
            return cls(
                target=str(value.get("target") or ""),
                payload=value.get("payload"),
                dry_run=value.get("dry_run") is not False,
                metadata=value.get("metadata"),
            )
        raise ConfigurationError(f"Noop driver cannot accept {type(value).__name__} input")




@dataclass(frozen=True)
class NoopDeliveryResult(DriverPayload):
    delivery_id: str
    target: str
    echo: Any
    dry_run: bool
    meta: Dict[str, str] = field(default_factory=dict)
    status: str = "noop"
    delivered: bool = False


@dataclass(frozen=True)
class NoopWebhookResult(DriverPayload):
    call_id: str
    target: str
    echo: Any
    dry_run: bool
    meta: Dict[str, str] = field(default_factory=dict)
    status: str = "noop"
    delivered: bool = False


class EchoDriver(Driver):
    """Returns its input unchanged."""

    name = "noop"

    async def execute(self, input: Any, context: Optional[DriverContext] = None) -> Any:
        return input


class NoopDeliveryDriver(Driver):
    """Records what would have been delivered without touching the network."""

    name = "noop_delivery_v0"
    id_prefix = "noop_"

    def _record(self, request: NoopDeliveryInput) -> Dict[str, Any]:
        return {
            "target": request.target,
            "echo": request.payload,
            "dry_run": request.dry_run,
            "meta": {"driver_version": self.name, "timestamp": utc_timestamp()},
        }

    def _new_id(self) -> str:
        return f"{self.id_prefix}{uuid.uuid4()}"

    async def execute(self, input: Any, context: Optional[DriverContext] = None) -> NoopDeliveryResult:
        request = NoopDeliveryInput.coerce(input)
        return NoopDeliveryResult(delivery_id=self._new_id(), **self._record(request))


class NoopWebhookDriver(NoopDeliveryDriver):
    """Webhook flavour of the noop delivery driver; records carry a call_id."""

    name = "noop_webhook_v0"
    id_prefix = "noop_webhook_"

    async def execute(self, input: Any, context: Optional[DriverContext] = None) -> NoopWebhookResult:
        request = NoopDeliveryInput.coerce(input)
        return NoopWebhookResult(call_id=self._new_id(), **self._record(request))


def noop_driver_factory() -> EchoDriver:
    return EchoDriver()


def noop_delivery_driver_v0_factory() -> NoopDeliveryDriver:
    return NoopDeliveryDriver()


def noop_webhook_driver_v0_factory() -> NoopWebhookDriver:
    return NoopWebhookDriver()


__all__ = [
    "EchoDriver",
    "NoopDeliveryDriver",
    "NoopDeliveryInput",
    "NoopDeliveryResult",
    "NoopWebhookDriver",
    "NoopWebhookResult",
    "noop_delivery_driver_v0_factory",
    "noop_driver_factory",
    "noop_webhook_driver_v0_factory",
]
