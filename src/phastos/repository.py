"""Repository state snapshots assembled from git queries."""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass
from pathlib import Path

from .changesets import ChangesetResolver, LocalChangeset
from .git import Divergence, FileChange, Git, RemoteBranch


@dataclass(frozen=True)
class RepositoryState:
    """Read-only view of a repository's branch topology.

    ``unsynced_remote_branches`` never contains a branch that some entry of
    ``local_changesets`` tracks.
    """

    current_branch: str | None
    main_branch: str | None
    is_main_branch: bool
    divergence: Divergence
    uncommitted_changes: tuple[FileChange, ...]
    local_changesets: tuple[LocalChangeset, ...]
    unsynced_remote_branches: tuple[RemoteBranch, ...]
    last_sync_from_main: dt.datetime | None = None

    @property
    def has_uncommitted_changes(self) -> bool:
        return bool(self.uncommitted_changes)

    def to_payload(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        payload = asdict(self)
        payload["last_sync_from_main"] = _iso(self.last_sync_from_main)
        payload["unsynced_remote_branches"] = [
            {"branch": item.branch, "last_commit_date": _iso(item.last_commit_date)}
            for item in self.unsynced_remote_branches
        ]
        return payload


def _iso(value: dt.datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


class RepositoryInspector:
    """Builds ``RepositoryState`` snapshots for a working directory."""

    def __init__(self, git: Git, resolver: ChangesetResolver | None = None) -> None:
        self._git = git
        self._resolver = resolver or ChangesetResolver(git)

    def inspect(
        self,
        repo_dir: Path,
        *,
        default_branch: str | None = None,
        refresh_remotes: bool = True,
    ) -> RepositoryState | None:
        """Return the repository state, or ``None`` when not a repository.

        Divergence and last-sync data are only computed off the main branch.
        """
        if not self._git.is_repository(repo_dir):
            return None
        located = self._git.locate_main_branch(repo_dir, default_branch)
        main_branch, main_ref = located if located else (None, None)
        current_branch = self._git.current_branch(repo_dir)
        is_main_branch = current_branch is not None and current_branch == main_branch
        changes = self._git.changeset(repo_dir)

        divergence = Divergence()
        last_sync: dt.datetime | None = None
        if main_ref and not is_main_branch:
            divergence = self._git.divergence(repo_dir, main_ref)
            last_sync = self._git.last_sync_from_main(repo_dir, main_ref)

        inventory = self._resolver.resolve(repo_dir, refresh=refresh_remotes)
        return RepositoryState(
            current_branch=current_branch,
            main_branch=main_branch,
            is_main_branch=is_main_branch,
            divergence=divergence,
            uncommitted_changes=tuple(changes),
            local_changesets=inventory.local_changesets,
            unsynced_remote_branches=inventory.unsynced_remote_branches,
            last_sync_from_main=last_sync,
        )
