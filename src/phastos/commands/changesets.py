"""Implementation for the ``phastos changesets`` command."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table

from ..changesets import format_date
from ..io import die, say_json
from .resolve import build_engine, resolve_project

_FORMATS = {"table", "json"}


def show_changesets(args: object) -> None:
    """List local changesets and remote branches without a local changeset."""
    format_value = str(getattr(args, "format", "table") or "table").lower()
    if format_value not in _FORMATS:
        die(f"unsupported format: {format_value}")

    project = resolve_project(args)
    engine = build_engine()
    if not engine.git.is_repository(project.working_directory):
        die(f"{project.working_directory} is not a git repository")
    inventory = engine.resolve_changesets(project)

    if format_value == "json":
        payload = {
            "local_changesets": [
                {"branch": item.branch, "tracking_branch": item.tracking_branch}
                for item in inventory.local_changesets
            ],
            "unsynced_remote_branches": [
                {
                    "branch": item.branch,
                    "last_commit_date": (
                        item.last_commit_date.isoformat() if item.last_commit_date else None
                    ),
                }
                for item in inventory.unsynced_remote_branches
            ],
        }
        say_json(payload)
        return

    console = Console()
    local = Table(title="Local Changesets", box=box.SIMPLE)
    local.add_column("Branch", no_wrap=True)
    local.add_column("Tracking", no_wrap=True)
    for item in inventory.local_changesets:
        local.add_row(item.branch, item.tracking_branch or "-")
    console.print(local if inventory.local_changesets else "No local changesets.")

    remote = Table(title="Remote Branches", box=box.SIMPLE)
    remote.add_column("Branch", no_wrap=True)
    remote.add_column("Last commit", no_wrap=True)
    for item in inventory.unsynced_remote_branches:
        remote.add_row(item.branch, format_date(item.last_commit_date))
    console.print(remote if inventory.unsynced_remote_branches else "No unsynced remote branches.")
