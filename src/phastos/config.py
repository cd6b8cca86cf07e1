"""Loading, locating and writing ``node_projects.json`` configuration."""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir
from pydantic import BaseModel, ValidationError

from .models import Project, ProjectsConfig
from .services.errors import IoFailedError, ValidationFailedError

PHASTOS_APP_NAME = "phastos"
CONFIG_FILE_NAME = "node_projects.json"
DEFAULT_PROJECT_NAME = "my-app"
DEFAULT_CUSTOM_COMMAND = "cosmic-deploy"


def user_config_path() -> Path:
    """Return the per-user config file location.

    Example:
        >>> user_config_path().name == CONFIG_FILE_NAME
        True
    """
    return Path(user_config_dir(PHASTOS_APP_NAME)) / CONFIG_FILE_NAME


def find_config_file(start: Path) -> Path | None:
    """Return the nearest ``node_projects.json`` at or above ``start``."""
    current = start.resolve()
    for directory in (current, *current.parents):
        candidate = directory / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def resolve_config_path(explicit: Path | None = None, *, cwd: Path | None = None) -> Path:
    """Pick the config file to use.

    An explicit path always wins, even when it does not exist yet. Otherwise
    the nearest file above ``cwd`` is used, then the per-user config.
    """
    if explicit is not None:
        return explicit.expanduser()
    found = find_config_file(cwd or Path.cwd())
    if found is not None:
        return found
    return user_config_path()


def load_json(path: Path) -> dict | None:
    """Load a JSON file if it exists.

    Example:
        >>> load_json(Path("missing.json")) is None
        True
    """
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def write_json(path: Path, payload: dict | BaseModel) -> None:
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(payload, fh, indent=2)
        fh.write("\n")


def _resolve_working_directories(config: ProjectsConfig, base_dir: Path) -> ProjectsConfig:
    projects: list[Project] = []
    for project in config.projects:
        working_directory = project.working_directory.expanduser()
        if not working_directory.is_absolute():
            working_directory = (base_dir / working_directory).resolve()
        projects.append(project.model_copy(update={"working_directory": working_directory}))
    return config.model_copy(update={"projects": projects})


def parse_projects_config(payload: object, source: Path | str | None = None) -> ProjectsConfig:
    """Validate a raw ``node_projects.json`` payload.

    Example:
        >>> config = parse_projects_config({
        ...     "projects": [{"name": "app", "workingDirectory": "/srv/app", "configuration": {}}]
        ... })
        >>> config.projects[0].configuration.toolchain
        'react-native'
    """
    location = f" at {source}" if source else ""
    try:
        return ProjectsConfig.model_validate(payload)
    except ValidationError as exc:
        raise ValidationFailedError(
            f"invalid project config{location}", detail=str(exc)
        ) from exc


def load_projects_config(path: Path) -> ProjectsConfig:
    """Load and validate ``path``; relative working directories resolve
    against the file's directory."""
    if not path.is_file():
        raise IoFailedError(
            f"config file not found: {path}",
            recovery_hint="run `phastos init` to create one",
        )
    try:
        payload = load_json(path)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationFailedError(
            f"invalid JSON in {path}",
            detail=str(exc),
            recovery_hint="save the file as UTF-8 encoded JSON",
        ) from exc
    except OSError as exc:
        raise IoFailedError(f"failed to read {path}", detail=str(exc)) from exc
    config = parse_projects_config(payload, path)
    return _resolve_working_directories(config, path.parent.resolve())


def default_projects_payload(name: str, working_directory: str) -> dict[str, object]:
    return {
        "version": "1.0",
        "projects": [
            {
                "name": name,
                "workingDirectory": working_directory,
                "configuration": {
                    "defaultBranch": "main",
                    "savePreference": "stash",
                    "toolchain": "react-native",
                    "defaultPlatform": "ios",
                },
                "customCommands": [
                    {
                        "alias": DEFAULT_CUSTOM_COMMAND,
                        "description": "Reset, update, install, build and test",
                        "operations": [
                            {"type": "clean_slate"},
                            {"type": "update"},
                            {"type": "install"},
                            {"type": "build", "parameters": {"platform": "both"}},
                            {"type": "test"},
                        ],
                    }
                ],
            }
        ],
    }


def create_default_config(
    path: Path,
    *,
    name: str = DEFAULT_PROJECT_NAME,
    working_directory: str = ".",
) -> ProjectsConfig:
    """Write a starter config to ``path``; an existing file is never replaced."""
    if path.exists():
        raise IoFailedError(
            f"config file already exists: {path}",
            recovery_hint="edit the existing file or pass --config to write elsewhere",
        )
    payload = default_projects_payload(name, working_directory)
    config = parse_projects_config(payload)
    write_projects_config(path, config)
    return config


def write_projects_config(path: Path, config: ProjectsConfig) -> None:
    try:
        write_json(path, config)
    except OSError as exc:
        raise IoFailedError(f"failed to write {path}", detail=str(exc)) from exc
