"""Implementation for the ``phastos status`` command."""

from __future__ import annotations

from rich import box
from rich.console import Console
from rich.table import Table

from ..changesets import format_date
from ..io import die, say_json
from ..models import Project
from ..repository import RepositoryState
from .resolve import build_engine, resolve_project

_FORMATS = {"table", "json"}


def show_status(args: object) -> None:
    """Show the repository state of a configured project."""
    format_value = str(getattr(args, "format", "table") or "table").lower()
    if format_value not in _FORMATS:
        die(f"unsupported format: {format_value}")

    project = resolve_project(args)
    engine = build_engine()
    state = engine.inspect_repository_state(project)
    if state is None:
        die(f"{project.working_directory} is not a git repository")

    if format_value == "json":
        payload = {
            "project": project.name,
            "working_directory": str(project.working_directory),
            **state.to_payload(),
        }
        say_json(payload)
        return

    _render_status(project, state)


def _render_status(project: Project, state: RepositoryState) -> None:
    console = Console()
    overview = Table(title="Repository Status", box=box.SIMPLE, show_header=False)
    overview.add_column("Field", style="bold")
    overview.add_column("Value", overflow="fold")
    overview.add_row("Project", project.name)
    overview.add_row("Directory", str(project.working_directory))
    overview.add_row("Current branch", _display_value(state.current_branch))
    overview.add_row("Main branch", _display_value(state.main_branch))
    overview.add_row("On main", _display_value(state.is_main_branch))
    if not state.is_main_branch:
        overview.add_row("Ahead of main", str(state.divergence.ahead))
        overview.add_row("Behind main", str(state.divergence.behind))
        overview.add_row("Last sync from main", format_date(state.last_sync_from_main))
    overview.add_row("Uncommitted changes", str(len(state.uncommitted_changes)))
    console.print(overview)

    if state.uncommitted_changes:
        table = Table(title="Uncommitted Changes", box=box.SIMPLE)
        table.add_column("Status", no_wrap=True)
        table.add_column("File", overflow="fold")
        for change in state.uncommitted_changes:
            table.add_row(change.status, change.file)
        console.print(table)

    if state.local_changesets:
        table = Table(title="Local Changesets", box=box.SIMPLE)
        table.add_column("Branch", no_wrap=True)
        table.add_column("Tracking", no_wrap=True)
        for changeset in state.local_changesets:
            marker = " *" if changeset.branch == state.current_branch else ""
            table.add_row(
                f"{changeset.branch}{marker}", _display_value(changeset.tracking_branch)
            )
        console.print(table)
    else:
        console.print("No local changesets.")

    if state.unsynced_remote_branches:
        table = Table(title="Remote Branches Not Checked Out", box=box.SIMPLE)
        table.add_column("Branch", no_wrap=True)
        table.add_column("Last commit", no_wrap=True)
        for remote in state.unsynced_remote_branches:
            table.add_row(remote.branch, format_date(remote.last_commit_date))
        console.print(table)


def _display_value(value: object) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value)
