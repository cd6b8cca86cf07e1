"""Implementation for the ``phastos init`` command."""

from __future__ import annotations

from pathlib import Path

from .. import config
from ..io import die, say
from ..services.errors import ServiceFailure
from .resolve import resolve_config_path


def init_config(args: object) -> None:
    """Write a starter ``node_projects.json``.

    Without ``--config`` the file is created in the current directory.

    Example:
        $ phastos init --name my-app --working-directory ../my-app
    """
    explicit = getattr(args, "config", None)
    path = resolve_config_path(args) if explicit else Path.cwd() / config.CONFIG_FILE_NAME
    name = str(getattr(args, "name", None) or config.DEFAULT_PROJECT_NAME)
    working_directory = str(getattr(args, "working_directory", None) or ".")
    try:
        config.create_default_config(path, name=name, working_directory=working_directory)
    except ServiceFailure as exc:
        die(exc.describe())
    say(f"Wrote {path}")
