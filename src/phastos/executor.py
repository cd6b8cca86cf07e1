"""Operation dispatch: one typed operation against one project."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Callable

from . import log
from .git import Git
from .models import Operation, OperationResult, OperationType, Project
from .services.changeset import (
    FreshChangesetRequest,
    FreshChangesetService,
    SwitchChangesetRequest,
    SwitchChangesetService,
)
from .services.changeset.fresh_changeset import Clock, epoch_millis
from .toolchains import ToolchainAdapter, ToolchainRegistry

Handler = Callable[[Operation, Project], OperationResult]

NOT_A_REPOSITORY = "Not a git repository"


def _type_name(operation: Operation) -> str:
    value = operation.type
    return value.value if isinstance(value, OperationType) else str(value)


class OperationExecutor:
    """Dispatches operations to git workflows or the project's toolchain.

    ``execute`` never raises: handler errors of any kind come back as an
    ``Operation failed`` result carrying the exception text.
    """

    def __init__(
        self,
        git: Git,
        toolchains: ToolchainRegistry,
        *,
        fresh_service: FreshChangesetService | None = None,
        switch_service: SwitchChangesetService | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._git = git
        self._toolchains = toolchains
        self._clock = clock or epoch_millis
        self._fresh = fresh_service or FreshChangesetService(git, clock=self._clock)
        self._switch = switch_service or SwitchChangesetService(git, clock=self._clock)
        self._handlers: dict[OperationType, Handler] = {
            OperationType.CLEAN_SLATE: self._clean_slate,
            OperationType.SAVE: self._save,
            OperationType.UPDATE: self._update,
            OperationType.INSTALL: self._install,
            OperationType.BUILD: self._build,
            OperationType.TEST: self._test,
            OperationType.RUN: self._run,
            OperationType.RESET: self._reset,
            OperationType.POD_INSTALL: self._pod_install,
            OperationType.FRESH: self._fresh_changeset,
            OperationType.SWITCH_CHANGESET: self._switch_changeset,
            OperationType.RUN_SCRIPT: self._run_script,
            OperationType.CUSTOM: self._custom,
        }

    def execute(self, operation: Operation, project: Project) -> OperationResult:
        type_name = _type_name(operation)
        log.info(f"Starting operation: {type_name} on {project.name}")
        try:
            handler = self._handlers.get(operation.type)
            if handler is None:
                result = OperationResult.failed(f"Unknown operation type: {type_name}")
            else:
                result = handler(operation, project)
        except Exception as exc:
            detail = str(exc) or type(exc).__name__
            log.error(f"Operation failed: {detail}")
            return OperationResult.failed("Operation failed", detail)
        _report(result)
        return result

    def toolchain_for(self, project: Project) -> ToolchainAdapter:
        return self._toolchains.resolve(project.configuration.toolchain)

    def _require_repository(self, project: Project) -> OperationResult | None:
        log.debug("Checking if directory is a git repository...")
        if self._git.is_repository(project.working_directory):
            return None
        log.warning(NOT_A_REPOSITORY)
        return OperationResult.failed(NOT_A_REPOSITORY)

    # Git workflows

    def _clean_slate(self, operation: Operation, project: Project) -> OperationResult:
        failure = self._require_repository(project)
        if failure is not None:
            return failure
        repo_dir = project.working_directory
        log.debug("Discarding all uncommitted changes...")
        outcome = self._git.reset_hard(repo_dir)
        if not outcome.success:
            return OperationResult.failed("Failed to reset working tree", outcome.error)
        outcome = self._git.clean_untracked(repo_dir)
        if not outcome.success:
            return OperationResult.failed("Failed to remove untracked files", outcome.error)
        return OperationResult.ok("Clean slate completed")

    def _save(self, operation: Operation, project: Project) -> OperationResult:
        failure = self._require_repository(project)
        if failure is not None:
            return failure
        repo_dir = project.working_directory
        if not self._git.has_uncommitted_changes(repo_dir):
            log.info("No changes to save")
            return OperationResult.ok("No changes to save")

        params = operation.parameters
        preference = params.save_preference or project.configuration.save_preference
        log.debug(f"Saving changes using {preference} strategy...")
        if preference == "branch":
            branch = params.branch_name or f"wip-{self._clock()}"
            outcome = self._git.create_branch(repo_dir, branch)
            if not outcome.success:
                return OperationResult.failed("Failed to save changes to a branch", outcome.error)
            return OperationResult.ok(f"Changes saved to branch {branch}")

        stamp = dt.datetime.now(dt.timezone.utc).isoformat()
        outcome = self._git.stash(repo_dir, f"Phastos auto-stash {stamp}")
        if not outcome.success:
            return OperationResult.failed("Failed to stash changes", outcome.error)
        return OperationResult.ok("Changes stashed successfully")

    def _update(self, operation: Operation, project: Project) -> OperationResult:
        failure = self._require_repository(project)
        if failure is not None:
            return failure
        repo_dir = project.working_directory
        branch = operation.parameters.branch or project.configuration.default_branch
        if branch:
            log.debug(f"Updating from branch: {branch}")
            outcome = self._git.checkout(repo_dir, branch)
            if not outcome.success:
                return OperationResult.failed(f"Failed to switch to {branch}", outcome.error)
        else:
            log.debug("Updating current branch...")
        outcome = self._git.pull_rebase(repo_dir)
        if not outcome.success:
            return OperationResult.failed("Failed to update repository", outcome.error)
        return OperationResult.ok("Repository updated")

    def _fresh_changeset(self, operation: Operation, project: Project) -> OperationResult:
        return self._fresh(
            FreshChangesetRequest(
                repo_dir=project.working_directory,
                changeset_name=operation.parameters.changeset_name,
                default_branch=project.configuration.default_branch,
            )
        )

    def _switch_changeset(self, operation: Operation, project: Project) -> OperationResult:
        params = operation.parameters
        return self._switch(
            SwitchChangesetRequest(
                repo_dir=project.working_directory,
                branch_name=params.branch_name,
                branch_type=params.branch_type,
            )
        )

    # Toolchain steps

    def _install(self, operation: Operation, project: Project) -> OperationResult:
        package_manager = (
            operation.parameters.package_manager or project.configuration.package_manager
        )
        log.debug(f"Installing dependencies using {package_manager or 'detected package manager'}...")
        return self.toolchain_for(project).install(project.working_directory, package_manager)

    def _build(self, operation: Operation, project: Project) -> OperationResult:
        params = operation.parameters
        platform = params.platform or project.configuration.default_platform
        toolchain = self.toolchain_for(project)
        log.debug(
            f"Building for {platform or 'default platform'} in "
            f"{params.mode or toolchain.default_mode} mode..."
        )
        return toolchain.build(project.working_directory, params.mode, platform)

    def _test(self, operation: Operation, project: Project) -> OperationResult:
        params = operation.parameters
        log.debug("Running tests...")
        if params.test_file:
            log.debug(f"Test file: {params.test_file}")
        if params.coverage:
            log.debug("Coverage enabled")
        return self.toolchain_for(project).test(
            project.working_directory, params.test_file, bool(params.coverage)
        )

    def _run(self, operation: Operation, project: Project) -> OperationResult:
        params = operation.parameters
        config = project.configuration
        platform = params.platform or config.default_platform
        device = params.device or config.default_device
        suffix = f" ({device})" if device else ""
        log.debug(f"Running app on {platform or 'default platform'}{suffix}...")
        return self.toolchain_for(project).run(
            project.working_directory, platform, device, params.mode
        )

    def _reset(self, operation: Operation, project: Project) -> OperationResult:
        toolchain = self.toolchain_for(project)
        log.debug(f"Resetting {toolchain.display_name} cache...")
        return toolchain.reset(project.working_directory)

    def _pod_install(self, operation: Operation, project: Project) -> OperationResult:
        log.debug("Installing CocoaPods dependencies...")
        return self.toolchain_for(project).pod_install(project.working_directory)

    def _run_script(self, operation: Operation, project: Project) -> OperationResult:
        params = operation.parameters
        if not params.script_name:
            log.warning('Run script requires a "scriptName" parameter')
            return OperationResult.failed('Run script requires a "scriptName" parameter')
        package_manager = params.package_manager or project.configuration.package_manager
        log.debug(f"Running script: {params.script_name}")
        return self.toolchain_for(project).run_script(
            project.working_directory, params.script_name, package_manager
        )

    def _custom(self, operation: Operation, project: Project) -> OperationResult:
        params = operation.parameters
        if not params.command:
            log.warning('Custom command requires a "command" parameter')
            return OperationResult.failed('Custom command requires a "command" parameter')
        working_dir = project.working_directory
        if params.working_directory:
            working_dir = working_dir / Path(params.working_directory).expanduser()
            log.debug(f"Working directory: {working_dir}")
        log.debug(f"Executing custom command: {params.command}")
        return self.toolchain_for(project).execute_custom_command(params.command, working_dir)


def _report(result: OperationResult) -> None:
    if result.success:
        log.success(result.message)
        return
    log.error(result.message)
    if result.error:
        log.error(result.error)
