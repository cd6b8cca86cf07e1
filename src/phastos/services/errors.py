"""Failures raised by Phastos services and config loading.

A failure carries a short ``message`` for the operation result, an optional
``detail`` with captured stderr or validation output, and an optional
``recovery_hint`` the CLI prints after the error.
"""

from __future__ import annotations

from typing import Literal

ServiceFailureCode = Literal[
    "validation_failed",
    "external_command_failed",
    "io_failed",
    "unexpected_state",
]


class ServiceFailure(Exception):
    """Expected failure of a workflow step or config operation."""

    def __init__(
        self,
        code: ServiceFailureCode,
        message: str,
        *,
        detail: str | None = None,
        recovery_hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.detail = detail
        self.recovery_hint = recovery_hint

    def describe(self) -> str:
        """Render message, detail and hint for terminal output.

        Example:
            >>> IoFailedError("config not found", recovery_hint="run init").describe()
            'config not found\\nhint: run init'
        """
        text = self.message
        if self.detail:
            text = f"{text}:\n{self.detail}"
        if self.recovery_hint:
            text = f"{text}\nhint: {self.recovery_hint}"
        return text


class ValidationFailedError(ServiceFailure):
    """Input or configuration did not validate."""

    def __init__(
        self, message: str, *, detail: str | None = None, recovery_hint: str | None = None
    ) -> None:
        super().__init__(
            "validation_failed", message, detail=detail, recovery_hint=recovery_hint
        )


class ExternalCommandFailedError(ServiceFailure):
    """A git or package-manager command exited unsuccessfully."""

    def __init__(
        self, message: str, *, detail: str | None = None, recovery_hint: str | None = None
    ) -> None:
        super().__init__(
            "external_command_failed", message, detail=detail, recovery_hint=recovery_hint
        )


class IoFailedError(ServiceFailure):
    """Reading or writing a config file failed."""

    def __init__(
        self, message: str, *, detail: str | None = None, recovery_hint: str | None = None
    ) -> None:
        super().__init__("io_failed", message, detail=detail, recovery_hint=recovery_hint)


class UnexpectedStateError(ServiceFailure):
    """The repository is not in a state the workflow can proceed from."""

    def __init__(
        self, message: str, *, detail: str | None = None, recovery_hint: str | None = None
    ) -> None:
        super().__init__(
            "unexpected_state", message, detail=detail, recovery_hint=recovery_hint
        )
