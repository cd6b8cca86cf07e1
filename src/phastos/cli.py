"""Phastos command-line interface."""

from pathlib import Path
from types import SimpleNamespace
from typing import Annotated, Optional

import typer

from . import __version__
from . import log as phastos_log
from .commands import init_config as init_cmd
from .commands import list_projects as list_cmd
from .commands import run_custom_command as custom_cmd
from .commands import run_operation as run_cmd
from .commands import show_changesets as changesets_cmd
from .commands import show_status as status_cmd
from .commands import start_changeset as fresh_cmd
from .commands import switch_changeset as switch_cmd

app = typer.Typer(
    help="Manage development projects on top of a changeset git workflow.",
    add_completion=False,
    no_args_is_help=True,
)


def _validate_log_level(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized not in phastos_log.LEVEL_NAMES:
        raise typer.BadParameter(f"expected one of: {', '.join(phastos_log.LEVEL_NAMES)}")
    return normalized


def _validate_format(value: str) -> str:
    normalized = value.strip().lower()
    if normalized not in {"table", "json"}:
        raise typer.BadParameter("expected one of: table, json")
    return normalized


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"phastos {__version__}")
        raise typer.Exit()


def _args(ctx: typer.Context, **values: object) -> SimpleNamespace:
    config_path = getattr(ctx.obj, "config", None) if ctx.obj is not None else None
    return SimpleNamespace(config=config_path, **values)


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Annotated[
        Optional[str],
        typer.Option(
            "--log-level",
            callback=_validate_log_level,
            help="Log level: trace, debug, info, success, warning or error.",
        ),
    ] = None,
    no_color: Annotated[
        bool, typer.Option("--no-color", help="Disable colored output.")
    ] = False,
    config: Annotated[
        Optional[Path],
        typer.Option("--config", help="Path to node_projects.json."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version", callback=_version_callback, is_eager=True, help="Show the version."
        ),
    ] = False,
) -> None:
    if log_level:
        phastos_log.set_level(log_level)
    if no_color:
        phastos_log.set_no_color(True)
    ctx.obj = SimpleNamespace(config=config)


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List configured projects."""
    list_cmd(_args(ctx))


@app.command("status")
def status_command(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Project name.")],
    format: Annotated[
        str, typer.Option("--format", callback=_validate_format, help="table or json.")
    ] = "table",
) -> None:
    """Show branch, divergence, uncommitted changes and changesets."""
    status_cmd(_args(ctx, project=project, format=format))


@app.command("changesets")
def changesets_command(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Project name.")],
    format: Annotated[
        str, typer.Option("--format", callback=_validate_format, help="table or json.")
    ] = "table",
) -> None:
    """List local changesets and unsynced remote branches."""
    changesets_cmd(_args(ctx, project=project, format=format))


@app.command("run")
def run_command(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Project name.")],
    operation: Annotated[str, typer.Argument(help="Operation type, e.g. build.")],
    params: Annotated[
        Optional[list[str]],
        typer.Option("--param", "-p", help="Operation parameter as KEY=VALUE."),
    ] = None,
) -> None:
    """Execute a single operation."""
    run_cmd(_args(ctx, project=project, operation=operation, params=params or []))


@app.command("custom")
def custom_command(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Project name.")],
    alias: Annotated[str, typer.Argument(help="Custom command alias.")],
    continue_on_error: Annotated[
        bool,
        typer.Option("--continue-on-error", help="Run every step even after a failure."),
    ] = False,
) -> None:
    """Execute a project's custom command sequence."""
    custom_cmd(
        _args(ctx, project=project, alias=alias, continue_on_error=continue_on_error)
    )


@app.command("fresh")
def fresh_command(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Project name.")],
    name: Annotated[
        Optional[str], typer.Argument(help="Changeset name (default: new-changeset).")
    ] = None,
) -> None:
    """Start or resume a changeset from the updated main branch."""
    fresh_cmd(_args(ctx, project=project, name=name))


@app.command("switch")
def switch_command(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Project name.")],
    branch: Annotated[str, typer.Argument(help="Branch to switch to.")],
    remote: Annotated[
        bool,
        typer.Option("--remote", help="Check out a remote branch as a local changeset."),
    ] = False,
) -> None:
    """Switch changesets, stashing uncommitted work first."""
    switch_cmd(_args(ctx, project=project, branch=branch, remote=remote))


@app.command("init")
def init_command(
    ctx: typer.Context,
    name: Annotated[Optional[str], typer.Option("--name", help="Project name.")] = None,
    working_directory: Annotated[
        Optional[str],
        typer.Option("--working-directory", help="Project working directory."),
    ] = None,
) -> None:
    """Write a starter node_projects.json."""
    init_cmd(_args(ctx, name=name, working_directory=working_directory))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
