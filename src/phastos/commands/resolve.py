"""Shared helpers for resolving config, projects and engines in commands."""

from __future__ import annotations

from pathlib import Path

from .. import config
from ..engine import Engine
from ..io import die, say
from ..models import OperationResult, Project, ProjectsConfig
from ..services.errors import ServiceFailure


def resolve_config_path(args: object) -> Path:
    explicit = getattr(args, "config", None)
    return config.resolve_config_path(Path(explicit) if explicit else None)


def load_projects(args: object) -> tuple[Path, ProjectsConfig]:
    """Load the projects config for ``args`` or exit with an error."""
    path = resolve_config_path(args)
    try:
        return path, config.load_projects_config(path)
    except ServiceFailure as exc:
        die(exc.describe())


def resolve_project(args: object) -> Project:
    name = str(getattr(args, "project", "") or "").strip()
    path, projects = load_projects(args)
    project = projects.find_project(name)
    if project is None:
        known = ", ".join(item.name for item in projects.projects)
        die(f"unknown project {name!r} in {path} (known: {known})")
    return project


def build_engine() -> Engine:
    return Engine.default()


def finish(result: OperationResult) -> None:
    """Print a result; a failed result exits non-zero."""
    if result.success:
        say(result.message)
        return
    message = result.message
    if result.error:
        message = f"{message}: {result.error}"
    die(message)
