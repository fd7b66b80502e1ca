from __future__ import annotations

from typing import Dict, List

from mova_agent.app.drivers.base import Driver, DriverFactory
from mova_agent.app.drivers.errors import DriverNotFoundError
from mova_agent.app.drivers.http import http_driver_factory
from mova_agent.app.drivers.noop import (
    noop_delivery_driver_v0_factory,
    noop_driver_factory,
    noop_webhook_driver_v0_factory,
)
from mova_agent.app.drivers.shell import restricted_shell_driver_factory
from mova_agent.app.drivers.webhook import http_webhook_delivery_driver_factory

_driver_factories: Dict[str, DriverFactory] = {}


def register_driver(name: str, factory: DriverFactory) -> None:
    if not name:
        raise ValueError("driver name is required")
    _driver_factories[name] = factory


def get_driver(name: str) -> Driver:
    factory = _driver_factories.get(name)
    if factory is None:
        raise DriverNotFoundError(name)
    return factory()


def list_drivers() -> List[str]:
    return list(_driver_factories.keys())


def unregister_driver(name: str) -> None:
    _driver_factories.pop(name, None)


register_driver("noop", noop_driver_factory)
register_driver("http", http_driver_factory)
register_driver("restricted_shell", restricted_shell_driver_factory)
register_driver("noop_delivery_v0", noop_delivery_driver_v0_factory)
register_driver("noop_webhook_v0", noop_webhook_driver_v0_factory)
register_driver("http_webhook_delivery_v1", http_webhook_delivery_driver_factory)


__all__ = ["get_driver", "list_drivers", "register_driver", "unregister_driver"]
