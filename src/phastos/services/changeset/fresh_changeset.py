"""Start or resume a changeset branch from an up-to-date main branch."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ConfigDict

from ... import log
from ...changesets import changeset_branch_name
from ...git import Git
from ...models import OperationResult
from ..base import BaseService
from ..errors import (
    ExternalCommandFailedError,
    ServiceFailure,
    UnexpectedStateError,
    ValidationFailedError,
)

Clock = Callable[[], int]


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class FreshChangesetRequest(BaseModel):
    """Input contract for the fresh workflow.

    Attributes:
        repo_dir: Repository working directory.
        changeset_name: Name under ``changeset/``; blank means the default.
        default_branch: Configured main branch hint.
    """

    repo_dir: Path
    changeset_name: str | None = None
    default_branch: str | None = None

    model_config = ConfigDict(frozen=True)


class FreshChangesetService(BaseService[FreshChangesetRequest, OperationResult]):
    """Stash local work, update main, then create or resume the changeset.

    Stash, checkout and pull failures halt the workflow at that step; an
    existing changeset branch is resumed rather than recreated.
    """

    def __init__(self, git: Git, *, clock: Clock | None = None) -> None:
        self._git = git
        self._clock = clock or epoch_millis

    def _run(self, request: FreshChangesetRequest) -> OperationResult:
        repo_dir = request.repo_dir
        if not self._git.is_repository(repo_dir):
            raise ValidationFailedError("Not a git repository")

        log.debug("Creating fresh changeset...")
        current_branch = self._git.current_branch(repo_dir)

        if self._git.has_uncommitted_changes(repo_dir):
            stash_name = f"wip-{current_branch or 'HEAD'}-{self._clock()}"
            log.debug(f"Stashing uncommitted changes as {stash_name}")
            outcome = self._git.stash(repo_dir, stash_name)
            if not outcome.success:
                raise ExternalCommandFailedError("Failed to stash changes", detail=outcome.error)

        main_branch = self._git.resolve_main_branch(repo_dir, request.default_branch)
        if main_branch is None:
            raise UnexpectedStateError(
                "Main branch not found",
                recovery_hint="set configuration.defaultBranch for this project",
            )

        if main_branch != current_branch:
            log.debug(f"Changing to main branch: {main_branch}")
            outcome = self._git.checkout(repo_dir, main_branch)
            if not outcome.success:
                raise ExternalCommandFailedError(
                    "Failed to switch to main branch", detail=outcome.error
                )

        log.debug("Updating to latest changes...")
        outcome = self._git.pull_rebase(repo_dir)
        if not outcome.success:
            raise ExternalCommandFailedError(
                "Failed to update to latest changes", detail=outcome.error
            )
        log.info("Latest changes updated successfully")

        target = changeset_branch_name(request.changeset_name)
        if self._git.branch_exists(repo_dir, target):
            log.warning(f"Branch {target} already exists. Switching to it...")
            outcome = self._git.checkout(repo_dir, target)
            if not outcome.success:
                raise ExternalCommandFailedError(
                    "Failed to switch to changeset branch", detail=outcome.error
                )
        else:
            log.debug(f"Creating new branch: {target}")
            outcome = self._git.create_branch(repo_dir, target)
            if not outcome.success:
                raise ExternalCommandFailedError(
                    "Failed to create changeset branch", detail=outcome.error
                )
        return OperationResult.ok("Changeset created/started successfully")

    def _handle_failure(self, error: ServiceFailure) -> OperationResult:
        if error.recovery_hint:
            log.debug(f"hint: {error.recovery_hint}")
        return OperationResult.failed(error.message, error.detail)
