"""Command implementations exposed by the Phastos CLI."""

from .changesets import show_changesets
from .custom import run_custom_command
from .init import init_config
from .list import list_projects
from .run import run_operation, start_changeset, switch_changeset
from .status import show_status

__all__ = [
    "init_config",
    "list_projects",
    "run_custom_command",
    "run_operation",
    "show_changesets",
    "show_status",
    "start_changeset",
    "switch_changeset",
]
