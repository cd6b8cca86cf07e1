"""User-facing output for CLI commands.

Log lines go through ``phastos.log``; these helpers print command results,
which are never filtered by the log level.
"""

from __future__ import annotations

import json
import sys
from typing import NoReturn


def say(message: str) -> None:
    """Print a command result line to stdout.

    Example:
        >>> say("Repository updated")
        Repository updated
    """
    print(message)


def say_json(payload: object) -> None:
    """Print ``payload`` as indented, key-sorted JSON.

    Example:
        >>> say_json({"success": True, "message": "Repository updated"})
        {
          "message": "Repository updated",
          "success": true
        }
    """
    print(json.dumps(payload, indent=2, sort_keys=True))


def die(message: str, code: int = 1) -> NoReturn:
    """Print ``error: <message>`` to stderr and exit with ``code``."""
    print(f"error: {message}", file=sys.stderr)
    sys.exit(code)
