"""Implementation for the ``phastos custom`` command."""

from __future__ import annotations

from ..io import die, say
from .resolve import build_engine, finish, resolve_project


def run_custom_command(args: object) -> None:
    """Run a project's custom command and report each step.

    Example:
        $ phastos custom my-app cosmic-deploy --continue-on-error
    """
    project = resolve_project(args)
    alias = str(getattr(args, "alias", "") or "").strip()
    command = project.find_custom_command(alias)
    if command is None:
        known = ", ".join(item.alias for item in project.custom_commands) or "none"
        die(f"unknown custom command {alias!r} for {project.name} (available: {known})")

    aggregate, results = build_engine().execute_custom_command(
        command,
        project,
        continue_on_error=bool(getattr(args, "continue_on_error", False)),
    )
    for operation, result in zip(command.operations, results):
        mark = "ok" if result.success else "failed"
        say(f"  [{mark}] {operation.label}: {result.message}")
    skipped = len(command.operations) - len(results)
    if skipped:
        say(f"  skipped {skipped} remaining step(s)")
    finish(aggregate)
