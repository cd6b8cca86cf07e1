"""Changeset branch naming and local/remote reconciliation."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from . import log
from .git import DEFAULT_REMOTE, Git, RemoteBranch

CHANGESET_PREFIX = "changeset/"
DEFAULT_CHANGESET_NAME = "new-changeset"


@dataclass(frozen=True)
class LocalChangeset:
    """A local ``changeset/*`` branch and the remote branch it tracks."""

    branch: str
    tracking_branch: str | None = None


@dataclass(frozen=True)
class ChangesetInventory:
    """Local changesets plus the remote branches no changeset tracks yet."""

    local_changesets: tuple[LocalChangeset, ...]
    unsynced_remote_branches: tuple[RemoteBranch, ...]
    remote_branches: tuple[RemoteBranch, ...]

    @property
    def tracked_remotes(self) -> frozenset[str]:
        return tracked_remote_branches(self.local_changesets)


def changeset_branch_name(name: str | None) -> str:
    """Return ``changeset/<name>``, defaulting the name when blank.

    Example:
        >>> changeset_branch_name("login-form")
        'changeset/login-form'
        >>> changeset_branch_name("  ")
        'changeset/new-changeset'
    """
    cleaned = (name or "").strip() or DEFAULT_CHANGESET_NAME
    return f"{CHANGESET_PREFIX}{cleaned}"


def local_branch_for_remote(remote_branch: str, remote: str = DEFAULT_REMOTE) -> str:
    """Return the local changeset name for a remote branch.

    A leading ``<remote>/`` and any existing ``changeset/`` prefix are
    removed before exactly one ``changeset/`` is re-added.

    Example:
        >>> local_branch_for_remote("origin/changeset/foo")
        'changeset/foo'
        >>> local_branch_for_remote("origin/feature/bar")
        'changeset/feature/bar'
    """
    name = remote_branch.strip()
    remote_prefix = f"{remote}/"
    if name.startswith(remote_prefix):
        name = name[len(remote_prefix) :]
    while name.startswith(CHANGESET_PREFIX):
        name = name[len(CHANGESET_PREFIX) :]
    return f"{CHANGESET_PREFIX}{name}"


def tracked_remote_branches(local_changesets: Iterable[LocalChangeset]) -> frozenset[str]:
    return frozenset(
        changeset.tracking_branch for changeset in local_changesets if changeset.tracking_branch
    )


def _recency_key(branch: RemoteBranch) -> tuple[int, float, str]:
    if branch.last_commit_date is None:
        return (1, 0.0, branch.branch)
    return (0, -branch.last_commit_date.timestamp(), branch.branch)


def sort_by_recency(branches: Iterable[RemoteBranch]) -> list[RemoteBranch]:
    """Sort newest first; ties by name, unknown dates last.

    Example:
        >>> a = RemoteBranch("origin/a", dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc))
        >>> b = RemoteBranch("origin/b", dt.datetime(2024, 6, 1, tzinfo=dt.timezone.utc))
        >>> [item.branch for item in sort_by_recency([a, RemoteBranch("origin/c"), b])]
        ['origin/b', 'origin/a', 'origin/c']
    """
    return sorted(branches, key=_recency_key)


def unsynced_remote_branches(
    remote_branches: Iterable[RemoteBranch], local_changesets: Iterable[LocalChangeset]
) -> list[RemoteBranch]:
    """Return remote branches that no local changeset tracks."""
    tracked = tracked_remote_branches(local_changesets)
    return [item for item in remote_branches if item.branch not in tracked]


class ChangesetResolver:
    """Reconciles local changeset branches with the remote's branches."""

    def __init__(self, git: Git) -> None:
        self._git = git

    def local_changesets(self, repo_dir: Path) -> list[LocalChangeset]:
        return [
            LocalChangeset(branch=branch, tracking_branch=upstream)
            for branch, upstream in self._git.local_branches_with_upstream(
                repo_dir, CHANGESET_PREFIX
            )
        ]

    def remote_branches(self, repo_dir: Path, *, refresh: bool = True) -> list[RemoteBranch]:
        """Return all remote branches sorted by recency.

        With ``refresh`` the remote refs are pruned and fetched first; a
        failed fetch falls back to the refs already known locally.
        """
        if refresh and not self._git.refresh_remotes(repo_dir):
            log.debug("remote refresh failed; using cached remote refs")
        return sort_by_recency(self._git.remote_branches(repo_dir))

    def resolve(self, repo_dir: Path, *, refresh: bool = True) -> ChangesetInventory:
        local = self.local_changesets(repo_dir)
        remotes = self.remote_branches(repo_dir, refresh=refresh)
        return ChangesetInventory(
            local_changesets=tuple(local),
            unsynced_remote_branches=tuple(unsynced_remote_branches(remotes, local)),
            remote_branches=tuple(remotes),
        )


def format_date(value: dt.datetime | None) -> str:
    """Render a commit date for tables.

    Example:
        >>> format_date(None)
        '-'
    """
    if value is None:
        return "-"
    return value.astimezone().strftime("%Y-%m-%d %H:%M")
