"""Implementations for ``phastos run``, ``fresh`` and ``switch``."""

from __future__ import annotations

from pydantic import ValidationError

from ..io import die
from ..models import Operation, OperationType
from .resolve import build_engine, finish, resolve_project

_OPERATION_TYPES = tuple(item.value for item in OperationType)


def parse_params(values: list[str] | None) -> dict[str, str]:
    """Parse ``KEY=VALUE`` pairs.

    Example:
        >>> parse_params(["platform=ios", "testFile=a.test.ts"])
        {'platform': 'ios', 'testFile': 'a.test.ts'}
    """
    params: dict[str, str] = {}
    for raw in values or []:
        key, sep, value = raw.partition("=")
        key = key.strip()
        if not sep or not key:
            die(f"invalid --param {raw!r}; expected KEY=VALUE")
        params[key] = value.strip()
    return params


def _build_operation(operation_type: str, params: dict[str, object]) -> Operation:
    normalized = operation_type.strip().lower()
    if normalized not in _OPERATION_TYPES:
        die(
            f"Unknown operation type: {operation_type} "
            f"(expected one of: {', '.join(_OPERATION_TYPES)})"
        )
    try:
        return Operation.model_validate({"type": normalized, "parameters": params})
    except ValidationError as exc:
        die(f"invalid parameters for {normalized}:\n{exc}")


def _execute(args: object, operation_type: str, params: dict[str, object]) -> None:
    project = resolve_project(args)
    operation = _build_operation(operation_type, params)
    finish(build_engine().execute(operation, project))


def run_operation(args: object) -> None:
    """Execute one operation against a project.

    Example:
        $ phastos run my-app build --param platform=android --param mode=release
    """
    _execute(
        args,
        str(getattr(args, "operation", "") or ""),
        dict(parse_params(getattr(args, "params", None))),
    )


def start_changeset(args: object) -> None:
    """Start or resume ``changeset/<name>`` from an updated main branch."""
    params: dict[str, object] = {}
    name = getattr(args, "name", None)
    if name:
        params["changesetName"] = name
    _execute(args, OperationType.FRESH.value, params)


def switch_changeset(args: object) -> None:
    """Switch to a local changeset, or check out a remote branch as one."""
    params: dict[str, object] = {
        "branchName": getattr(args, "branch", None),
        "branchType": "remote" if getattr(args, "remote", False) else "local",
    }
    _execute(args, OperationType.SWITCH_CHANGESET.value, params)
