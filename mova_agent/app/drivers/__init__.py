from .base import Driver, DriverContext, DriverFactory, DriverLimits
from .errors import ConfigurationError, DriverError, DriverNotFoundError, PolicyViolation
from .http import HttpDriver, HttpInput, HttpResult, http_driver_factory
from .noop import (
    NoopDeliveryInput,
    NoopDeliveryResult,
    NoopWebhookResult,
    noop_delivery_driver_v0_factory,
    noop_driver_factory,
    noop_webhook_driver_v0_factory,
)
from .policy import is_allowed, is_url_allowed
from .registry import get_driver, list_drivers, register_driver, unregister_driver
from .shell import (
    ProcessFailure,
    ProcessOutput,
    RestrictedShellDriver,
    ShellInput,
    ShellResult,
    restricted_shell_driver_factory,
    run_process,
)
from .webhook import (
    HttpWebhookDeliveryDriver,
    WebhookDeliveryInput,
    WebhookDeliveryResult,
    http_webhook_delivery_driver_factory,
)

__all__ = [
    "ConfigurationError",
    "Driver",
    "DriverContext",
    "DriverError",
    "DriverFactory",
    "DriverLimits",
    "DriverNotFoundError",
    "HttpDriver",
    "HttpInput",
    "HttpResult",
    "HttpWebhookDeliveryDriver",
    "NoopDeliveryInput",
    "NoopDeliveryResult",
    "NoopWebhookResult",
    "PolicyViolation",
    "ProcessFailure",
    "ProcessOutput",
    "RestrictedShellDriver",
    "ShellInput",
    "ShellResult",
    "WebhookDeliveryInput",
    "WebhookDeliveryResult",
    "get_driver",
    "http_driver_factory",
    "http_webhook_delivery_driver_factory",
    "is_allowed",
    "is_url_allowed",
    "list_drivers",
    "noop_delivery_driver_v0_factory",
    "noop_driver_factory",
    "noop_webhook_driver_v0_factory",
    "register_driver",
    "restricted_shell_driver_factory",
    "run_process",
    "unregister_driver",
]
