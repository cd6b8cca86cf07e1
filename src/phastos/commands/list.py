"""Implementation for the ``phastos list`` command."""

from ..io import say
from .resolve import load_projects


def list_projects(args: object) -> None:
    """List configured projects.

    Example:
        $ phastos list
    """
    _path, projects = load_projects(args)
    rows = [("project", "toolchain", "directory")]
    for project in projects.projects:
        rows.append(
            (project.name, project.configuration.toolchain, str(project.working_directory))
        )

    widths = [max(len(row[index]) for row in rows) for index in range(len(rows[0]))]
    for row in rows:
        say(
            "  ".join(
                value.ljust(widths[index]) for index, value in enumerate(row)
            ).rstrip()
        )
