"""Pydantic models for Phastos project configuration and operations.

On disk the configuration uses camelCase keys (``workingDirectory``,
``savePreference``); attributes are snake_case.

Example:
    >>> op = Operation.model_validate({"type": "build", "parameters": {"platform": "ios"}})
    >>> op.type is OperationType.BUILD
    True
    >>> op.parameters.platform
    'ios'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

SavePreference = Literal["stash", "branch"]
Platform = Literal["ios", "android", "web", "both"]
PackageManager = Literal["npm", "yarn", "pnpm", "bun", "deno"]
BranchType = Literal["local", "remote"]

DEFAULT_TOOLCHAIN = "react-native"


class OperationType(str, Enum):
    """Closed set of operations the executor knows how to dispatch."""

    CLEAN_SLATE = "clean_slate"
    SAVE = "save"
    UPDATE = "update"
    INSTALL = "install"
    BUILD = "build"
    TEST = "test"
    RUN = "run"
    RESET = "reset"
    POD_INSTALL = "pod_install"
    FRESH = "fresh"
    SWITCH_CHANGESET = "switch_changeset"
    RUN_SCRIPT = "run_script"
    CUSTOM = "custom"


def _strip_optional(value: object) -> object:
    if isinstance(value, str):
        normalized = value.strip()
        return normalized or None
    return value


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class OperationParameters(_CamelModel):
    """Free-form operation parameters.

    Unknown keys are kept so toolchain-specific settings survive a round trip.

    Example:
        >>> OperationParameters.model_validate({"packageManager": "yarn"}).package_manager
        'yarn'
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    platform: Platform | None = None
    device: str | None = None
    mode: str | None = None
    test_file: str | None = None
    coverage: bool | None = None
    command: str | None = None
    working_directory: str | None = None
    package_manager: PackageManager | None = None
    save_preference: SavePreference | None = None
    branch: str | None = None
    branch_name: str | None = None
    branch_type: BranchType | None = None
    changeset_name: str | None = None
    script_name: str | None = None
    verbose: bool | None = None
    skip_confirmation: bool | None = None

    @field_validator(
        "device",
        "mode",
        "test_file",
        "command",
        "working_directory",
        "branch",
        "branch_name",
        "changeset_name",
        "script_name",
        mode="before",
    )
    @classmethod
    def normalize_optional_strings(cls, value: object) -> object:
        return _strip_optional(value)

    @field_validator("platform", "package_manager", "save_preference", "branch_type", mode="before")
    @classmethod
    def normalize_choices(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            return normalized or None
        return value


class Operation(_CamelModel):
    """A single typed step of work against a project."""

    type: OperationType
    description: str | None = None
    parameters: OperationParameters = Field(default_factory=OperationParameters)

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("parameters", mode="before")
    @classmethod
    def default_parameters(cls, value: object) -> object:
        if value is None:
            return {}
        return value

    @property
    def label(self) -> str:
        return self.description or self.type.value


class CustomCommand(_CamelModel):
    """A named, ordered operation list defined per project.

    Example:
        >>> cmd = CustomCommand(alias="ship", operations=[{"type": "install"}])
        >>> [op.type.value for op in cmd.operations]
        ['install']
    """

    alias: str
    description: str = ""
    operations: list[Operation]

    @field_validator("alias", mode="before")
    @classmethod
    def normalize_alias(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("alias")
    @classmethod
    def require_alias(cls, value: str) -> str:
        if not value:
            raise ValueError('"alias" is required')
        return value


class ProjectConfiguration(_CamelModel):
    """Per-project defaults consulted when operation parameters omit a value.

    Attributes:
        default_branch: Preferred main branch name, tried before the
            ``develop``/``main``/``master`` fallbacks.
        save_preference: ``stash`` or ``branch`` for the ``save`` operation.
        toolchain: Toolchain id selecting the build/run/test adapter.
        package_manager: Package manager override; detected when unset.
        default_platform: Platform used by ``run``/``build`` when omitted.
        default_device: Simulator/device name used by ``run``.
    """

    default_branch: str | None = None
    save_preference: SavePreference = "stash"
    toolchain: str = DEFAULT_TOOLCHAIN
    package_manager: PackageManager | None = None
    default_platform: Platform | None = None
    default_device: str | None = None
    ios_scheme: str | None = None
    android_flavor: str | None = None

    @field_validator("default_branch", "default_device", "ios_scheme", "android_flavor", mode="before")
    @classmethod
    def normalize_optional_strings(cls, value: object) -> object:
        return _strip_optional(value)

    @field_validator("toolchain", mode="before")
    @classmethod
    def normalize_toolchain(cls, value: object) -> object:
        if value is None:
            return DEFAULT_TOOLCHAIN
        if isinstance(value, str):
            return value.strip().lower() or DEFAULT_TOOLCHAIN
        return value

    @field_validator("package_manager", "default_platform", mode="before")
    @classmethod
    def normalize_choices(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            return normalized or None
        return value

    @field_validator("save_preference", mode="before")
    @classmethod
    def normalize_save_preference(cls, value: object) -> object:
        if value is None:
            return "stash"
        if isinstance(value, str):
            return value.strip().lower() or "stash"
        return value


class Project(_CamelModel):
    """A configured project: identity, working directory, and defaults."""

    name: str
    working_directory: Path
    repository_url: str | None = Field(default=None, alias="repositoryURL")
    configuration: ProjectConfiguration
    custom_commands: list[CustomCommand] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("name")
    @classmethod
    def require_name(cls, value: str) -> str:
        if not value:
            raise ValueError('"name" is required')
        return value

    @field_validator("working_directory", mode="before")
    @classmethod
    def require_working_directory(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            raise ValueError('"workingDirectory" is required')
        return value

    @field_validator("custom_commands", mode="before")
    @classmethod
    def default_custom_commands(cls, value: object) -> object:
        if value is None:
            return []
        return value

    def find_custom_command(self, alias: str) -> CustomCommand | None:
        for command in self.custom_commands:
            if command.alias == alias:
                return command
        return None


class ProjectsConfig(_CamelModel):
    """Root of a ``node_projects.json`` file."""

    version: str | None = "1.0"
    projects: list[Project]

    @model_validator(mode="after")
    def validate_projects(self) -> ProjectsConfig:
        if not self.projects:
            raise ValueError("at least one project is required")
        seen: set[str] = set()
        for project in self.projects:
            if project.name in seen:
                raise ValueError(f'duplicate project name: "{project.name}"')
            seen.add(project.name)
        return self

    def find_project(self, name: str) -> Project | None:
        for project in self.projects:
            if project.name == name:
                return project
        return None


@dataclass(frozen=True)
class OperationResult:
    """Normalized outcome of one operation.

    Example:
        >>> OperationResult.failed("Not a git repository").success
        False
    """

    success: bool
    message: str
    error: str | None = None

    @classmethod
    def ok(cls, message: str) -> OperationResult:
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, message: str, error: str | None = None) -> OperationResult:
        return cls(success=False, message=message, error=error)
