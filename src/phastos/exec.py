"""Subprocess helpers for running external commands."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Protocol

from . import log

DEFAULT_TIMEOUT_SECONDS = 900.0
TIMEOUT_ENV_VAR = "PHASTOS_COMMAND_TIMEOUT"
TIMED_OUT_DETAIL = "timed out"


@dataclass(frozen=True)
class CommandRequest:
    """Typed command invocation request."""

    argv: tuple[str, ...]
    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class CommandResult:
    """Typed command execution result."""

    argv: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CommandRunner(Protocol):
    """Runtime command-execution interface."""

    def run(self, request: CommandRequest) -> CommandResult | None: ...


def _decode(value: object) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        return value
    return ""


def default_timeout_seconds() -> float | None:
    """Return the per-process timeout from the environment.

    ``PHASTOS_COMMAND_TIMEOUT`` holds seconds; ``0`` disables the timeout and
    unparseable values fall back to the default.

    Example:
        >>> default_timeout_seconds() is None or default_timeout_seconds() > 0
        True
    """
    raw = os.environ.get(TIMEOUT_ENV_VAR, "").strip()
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    if value <= 0:
        return None
    return value


class SubprocessCommandRunner:
    """Default command-runner adapter backed by subprocess.

    Output is captured as bytes and decoded as UTF-8 with replacement so a
    stray byte in tool output never turns into an exception.
    """

    def __init__(self, *, timeout_seconds: float | None = None) -> None:
        self._timeout_seconds = timeout_seconds

    def run(self, request: CommandRequest) -> CommandResult | None:
        timeout = request.timeout_seconds
        if timeout is None:
            timeout = self._timeout_seconds
        run_kwargs: dict[str, object] = {
            "cwd": request.cwd,
            "env": request.env,
            "check": False,
            "capture_output": True,
            "stdin": subprocess.DEVNULL,
        }
        if timeout is not None:
            run_kwargs["timeout"] = timeout
        log.trace(f"$ {' '.join(request.argv)}")
        try:
            completed = subprocess.run(list(request.argv), **run_kwargs)
        except FileNotFoundError:
            return None
        except subprocess.TimeoutExpired as exc:
            return CommandResult(
                argv=request.argv,
                returncode=124,
                stdout=_decode(exc.stdout),
                stderr=_decode(exc.stderr),
                timed_out=True,
            )

        return CommandResult(
            argv=request.argv,
            returncode=completed.returncode,
            stdout=_decode(completed.stdout),
            stderr=_decode(completed.stderr),
        )


def default_runner() -> CommandRunner:
    """Build the subprocess runner using the configured timeout."""
    return SubprocessCommandRunner(timeout_seconds=default_timeout_seconds())


def missing_command_detail(argv: tuple[str, ...]) -> str:
    if not argv:
        return "missing required command"
    return f"missing required command: {argv[0]}"


def failure_detail(argv: tuple[str, ...], result: CommandResult | None) -> str:
    """Return the diagnostic text for a failed command.

    Prefers stderr, then stdout, then a generic ``command failed`` line.
    """
    if result is None:
        return missing_command_detail(argv)
    if result.timed_out:
        return TIMED_OUT_DETAIL
    output = (result.stderr or result.stdout or "").strip()
    if output:
        return output
    return f"command failed: {' '.join(argv)}"
