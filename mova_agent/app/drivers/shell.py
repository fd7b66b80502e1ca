"""
Restricted shell driver.

Runs a single executable (no shell interpolation) under the context
allowlist and timeout. Only input and policy problems raise; every
failure of the process itself comes back as a ShellResult with a
non-zero exit_code.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence, Tuple

from mova_agent.app.config import safe_error_detail
from mova_agent.app.drivers.base import Driver, DriverContext, DriverPayload, coerce_context
from mova_agent.app.drivers.errors import ConfigurationError, PolicyViolation
from mova_agent.app.drivers.policy import is_allowed
from mova_agent.app.observability import structured_log
from mova_agent.app.perf import DriverTimeoutError, elapsed_ms, enforce_timeout

_READ_CHUNK_BYTES = 65536


@dataclass(frozen=True)
class ShellInput(DriverPayload):
    command: str
    args: Tuple[str, ...] = ()
    kind: str = "shell"

    @classmethod
    def coerce(cls, value: Any) -> "ShellInput":
        if isinstance(value, ShellInput):
            return value
        if isinstance(value, Mapping):
            args = value.get("args") or ()
            if isinstance(args, (str, bytes)) or not isinstance(args, Sequence):
                raise ConfigurationError("Restricted shell driver args must be a sequence of strings")
            return cls(command=str(value.get("command") or ""), args=tuple(str(a) for a in args))
        raise ConfigurationError(f"Restricted shell driver cannot accept {type(value).__name__} input")


@dataclass(frozen=True)
class ShellResult(DriverPayload):
    stdout: str
    stderr: str
    exit_code: int
    command: str
    args: Tuple[str, ...]
    timed_out: bool = False
    duration_ms: int = 0
    kind: str = "shell"

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class ProcessOutput:
    stdout: str
    stderr: str


class ProcessFailure(Exception):
    """Raised by a process runner when the process did not complete successfully."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.stdout = stdout
        self.stderr = stderr
        self.timed_out = timed_out


ProcessRunner = Callable[..., Awaitable[ProcessOutput]]


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


async def _collect(stream: Optional[asyncio.StreamReader], sink: bytearray) -> None:
    if stream is None:
        return
    while True:
        chunk = await stream.read(_READ_CHUNK_BYTES)
        if not chunk:
            return
        sink.extend(chunk)


def _kill(proc: asyncio.subprocess.Process) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass


async def run_process(
    command: str,
    args: Sequence[str],
    *,
    timeout_ms: int,
    windows_hide: bool = True,
) -> ProcessOutput:
    """
    Default process runner.

    Spawns ``command`` with ``args`` directly (no shell), collects stdout and
    stderr, and kills the process when ``timeout_ms`` elapses. Output read
    before the kill is kept on the raised ProcessFailure.

    Raises:
        ProcessFailure: spawn error, non-zero exit, or timeout
    """
    kwargs = {}
    if windows_hide and sys.platform == "win32":
        kwargs["creationflags"] = subprocess.CREATE_NO_WINDOW

    try:
        proc = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            **kwargs,
        )
    except OSError as exc:
        raise ProcessFailure(f"Failed to spawn {command}: {exc.strerror or exc}") from exc

    out = bytearray()
    err = bytearray()

    async def _communicate() -> None:
        await asyncio.gather(_collect(proc.stdout, out), _collect(proc.stderr, err), proc.wait())

    try:
        await enforce_timeout(_communicate, timeout_ms)
    except DriverTimeoutError as exc:
        _kill(proc)
        await proc.wait()
        raise ProcessFailure(
            f"Command timed out after {timeout_ms} ms: {command}",
            stdout=_decode(bytes(out)),
            stderr=_decode(bytes(err)),
            timed_out=True,
        ) from exc

    stdout, stderr = _decode(bytes(out)), _decode(bytes(err))
    if proc.returncode != 0:
        raise ProcessFailure(
            f"Command failed: {' '.join([command, *args])}",
            code=proc.returncode,
            stdout=stdout,
            stderr=stderr,
        )
    return ProcessOutput(stdout=stdout, stderr=stderr)


def _failure_exit_code(exc: BaseException) -> int:
    code = getattr(exc, "code", None)
    if isinstance(code, int) and not isinstance(code, bool) and code > 0:
        return code
    return 1


class RestrictedShellDriver(Driver):
    name = "restricted_shell"

    def __init__(self, runner: Optional[ProcessRunner] = None) -> None:
        self._runner: ProcessRunner = runner or run_process

    @property
    def runner(self) -> ProcessRunner:
        return self._runner

    async def execute(self, input: Any, context: Optional[DriverContext] = None) -> ShellResult:
        shell_input = ShellInput.coerce(input)
        ctx = coerce_context(context)
        command, args = shell_input.command, shell_input.args

        if not command.strip():
            raise ConfigurationError("Restricted shell driver requires command")

        if not is_allowed(command, ctx.allowlist, deny_by_default=ctx.denies_by_default):
            structured_log(
                {"event": "driver.policy_denied", "driver": self.name, "target": command},
                level=logging.WARNING,
            )
            raise PolicyViolation(command, kind="command")

        timeout_ms = ctx.timeout_ms
        started = time.monotonic()
        try:
            output = await self._runner(command, list(args), timeout_ms=timeout_ms, windows_hide=True)
        except Exception as exc:  # noqa: BLE001
            result = ShellResult(
                stdout=getattr(exc, "stdout", "") or "",
                stderr=getattr(exc, "stderr", "") or str(exc) or type(exc).__name__,
                exit_code=_failure_exit_code(exc),
                command=command,
                args=args,
                timed_out=bool(getattr(exc, "timed_out", False)) or isinstance(exc, TimeoutError),
                duration_ms=elapsed_ms(started),
            )
            structured_log(
                {
                    "event": "driver.failure",
                    "driver": self.name,
                    "command": command,
                    "exit_code": result.exit_code,
                    "timed_out": result.timed_out,
                    "detail": safe_error_detail(exc),
                },
                level=logging.WARNING,
            )
            return result

        result = ShellResult(
            stdout=output.stdout,
            stderr=output.stderr,
            exit_code=0,
            command=command,
            args=args,
            duration_ms=elapsed_ms(started),
        )
        structured_log(
            {
                "event": "driver.execute",
                "driver": self.name,
                "command": command,
                "exit_code": 0,
                "duration_ms": result.duration_ms,
            }
        )
        return result


def restricted_shell_driver_factory(runner: Optional[ProcessRunner] = None) -> RestrictedShellDriver:
    return RestrictedShellDriver(runner=runner)


__all__ = [
    "ProcessFailure",
    "ProcessOutput",
    "ProcessRunner",
    "RestrictedShellDriver",
    "ShellInput",
    "ShellResult",
    "restricted_shell_driver_factory",
    "run_process",
]
