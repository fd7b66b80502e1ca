class DriverError(Exception):
    """Base class for call-level driver failures."""


class ConfigurationError(DriverError):
    """Raised when driver input is malformed (missing command, url, ...)."""


class DriverNotFoundError(ConfigurationError):
    """Raised when no driver is registered under the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Driver not found: {name}")
        self.name = name


class PolicyViolation(DriverError):
    """Raised when a target is rejected by the allowlist."""

    def __init__(self, target: str, kind: str = "target") -> None:
        super().__init__(f"{kind.capitalize()} not allowlisted: {target}")
        self.target = target
        self.kind = kind


__all__ = [
    "DriverError",
    "ConfigurationError",
    "DriverNotFoundError",
    "PolicyViolation",
]
