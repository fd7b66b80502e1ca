"""Driver capability interface and the per-call execution context."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from mova_agent.app.config import DEFAULT_TIMEOUT_MS, get_settings
from mova_agent.app.drivers.errors import ConfigurationError
from mova_agent.app.perf import resolve_timeout_ms


@dataclass(frozen=True)
class DriverLimits:
    """
    Per-call limits.

    Attributes:
        timeout_ms: Deadline for the external operation; non-positive or
            missing values fall back to the default
        max_data_size: Advisory only, not enforced by the built-in drivers
    """
    timeout_ms: Optional[int] = None
    max_data_size: Optional[int] = None

    def resolved_timeout_ms(self, default: int = DEFAULT_TIMEOUT_MS) -> int:
        return resolve_timeout_ms(self.timeout_ms, default)


@dataclass(frozen=True)
class DriverContext:
    """
    Caller-built context for a single ``execute`` call. Not retained.

    Attributes:
        driver_name: Optional label, used in logs only
        allowlist: Ordered target prefixes; empty means unrestricted
            unless deny_by_default is set
        limits: Time and size limits
        bindings: Opaque, driver-specific values
        deny_by_default: Opt-in hardening; when None the setting
            MOVA_ALLOWLIST_DENY_BY_DEFAULT decides
    """
    driver_name: Optional[str] = None
    allowlist: Tuple[str, ...] = ()
    limits: DriverLimits = field(default_factory=DriverLimits)
    bindings: Optional[Mapping[str, Any]] = None
    deny_by_default: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "DriverContext":
        if not data:
            return cls()
        limits = data.get("limits") or {}
        if isinstance(limits, DriverLimits):
            limits = asdict(limits)
        if not isinstance(limits, Mapping):
            raise ConfigurationError(f"context limits must be a mapping, got {type(limits).__name__}")
        allowlist = data.get("allowlist") or ()
        if not isinstance(allowlist, (list, tuple)):
            raise ConfigurationError(f"context allowlist must be a list, got {type(allowlist).__name__}")
        return cls(
            driver_name=data.get("driverName") or data.get("driver_name"),
            allowlist=tuple(allowlist),
            limits=DriverLimits(
                timeout_ms=limits.get("timeout_ms"),
                max_data_size=limits.get("max_data_size"),
            ),
            bindings=data.get("bindings"),
            deny_by_default=data.get("deny_by_default"),
        )

    @property
    def timeout_ms(self) -> int:
        return self.limits.resolved_timeout_ms(get_settings().default_timeout_ms)

    @property
    def denies_by_default(self) -> bool:
        if self.deny_by_default is not None:
            return bool(self.deny_by_default)
        return get_settings().allowlist_deny_by_default


def coerce_context(context: Any) -> DriverContext:
    if context is None:
        return DriverContext()
    if isinstance(context, DriverContext):
        return context
    if isinstance(context, Mapping):
        return DriverContext.from_dict(context)
    raise ConfigurationError(f"unsupported driver context: {type(context).__name__}")


class DriverPayload:
    """Mixin for driver inputs and results."""

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


class Driver(ABC):
    """Capability shared by every driver variant."""

    name: str = "driver"

    @abstractmethod
    async def execute(self, input: Any, context: Optional[DriverContext] = None) -> Any:
        """
        Run one external operation.

        Raises:
            ConfigurationError: malformed input
            PolicyViolation: target rejected by the allowlist

        Failures of the operation itself (non-zero exit, remote error,
        timeout) are returned as result values, never raised.
        """


DriverFactory = Callable[[], Driver]


__all__ = [
    "Driver",
    "DriverContext",
    "DriverFactory",
    "DriverLimits",
    "DriverPayload",
    "coerce_context",
]
