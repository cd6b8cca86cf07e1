"""Switch to a local changeset or check out a remote branch as one."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from ... import log
from ...changesets import local_branch_for_remote
from ...git import Git
from ...models import BranchType, OperationResult
from ..base import BaseService
from ..errors import ExternalCommandFailedError, ServiceFailure, ValidationFailedError
from .fresh_changeset import Clock, epoch_millis


class SwitchChangesetRequest(BaseModel):
    """Input contract for the switch workflow.

    Attributes:
        repo_dir: Repository working directory.
        branch_name: Local branch name, or a remote branch such as
            ``origin/changeset/foo`` when ``branch_type`` is ``remote``.
        branch_type: ``local`` or ``remote``.
    """

    repo_dir: Path
    branch_name: str | None = None
    branch_type: BranchType = "local"

    model_config = ConfigDict(frozen=True)

    @field_validator("branch_type", mode="before")
    @classmethod
    def default_branch_type(cls, value: object) -> object:
        if value is None:
            return "local"
        return value


class SwitchChangesetService(BaseService[SwitchChangesetRequest, OperationResult]):
    """Auto-stash local work, then switch branches.

    A failed auto-stash aborts before any checkout so uncommitted work is
    never carried onto the target branch.
    """

    def __init__(self, git: Git, *, clock: Clock | None = None) -> None:
        self._git = git
        self._clock = clock or epoch_millis

    def _target(self, request: SwitchChangesetRequest) -> str:
        if request.branch_type == "remote":
            return local_branch_for_remote(request.branch_name or "", self._git.remote)
        return request.branch_name or ""

    def _run(self, request: SwitchChangesetRequest) -> OperationResult:
        if not request.branch_name:
            raise ValidationFailedError('Switch requires a "branchName" parameter')
        repo_dir = request.repo_dir
        if not self._git.is_repository(repo_dir):
            raise ValidationFailedError("Not a git repository")

        target = self._target(request)
        if self._git.has_uncommitted_changes(repo_dir):
            stash_name = f"auto-stash-before-switch-{target}-{self._clock()}"
            log.debug(f"Stashing uncommitted changes as {stash_name}")
            outcome = self._git.stash(repo_dir, stash_name)
            if not outcome.success:
                raise ExternalCommandFailedError(
                    "Failed to stash changes before switching", detail=outcome.error
                )

        if request.branch_type == "remote":
            log.debug(f"Checking out {request.branch_name} as {target}")
            outcome = self._git.checkout_tracking(repo_dir, target, request.branch_name)
        else:
            log.debug(f"Checking out {target}")
            outcome = self._git.checkout(repo_dir, target)
        if not outcome.success:
            raise ExternalCommandFailedError(f"Failed to switch to {target}", detail=outcome.error)
        return OperationResult.ok(f"Switched to {target}")

    def _handle_failure(self, error: ServiceFailure) -> OperationResult:
        return OperationResult.failed(error.message, error.detail)
