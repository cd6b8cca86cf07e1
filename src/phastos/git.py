"""Git queries and mutations used by the Phastos engine.

Queries are best-effort: a failed git call degrades to ``None``, ``False`` or
an empty collection. Mutations return a ``GitOutcome`` carrying git's stderr
so callers can report it verbatim.
"""

from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass
from pathlib import Path

from . import exec as exec_util

MAIN_BRANCH_CANDIDATES = ("develop", "main", "master")
DEFAULT_REMOTE = "origin"

_STATUS_LABELS = {
    "M": "Modified",
    "A": "Added",
    "D": "Deleted",
    "R": "Renamed",
    "C": "Copied",
}


@dataclass(frozen=True)
class FileChange:
    """One ``git status --porcelain`` entry."""

    status: str
    file: str


@dataclass(frozen=True)
class Divergence:
    """Commits ``HEAD`` has that main lacks (ahead) and the reverse (behind)."""

    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class RemoteBranch:
    """A remote-tracking branch and the time of its latest commit."""

    branch: str
    last_commit_date: dt.datetime | None = None


@dataclass(frozen=True)
class GitOutcome:
    """Result of a mutating git command."""

    success: bool
    output: str = ""
    error: str | None = None


def git_command(args: list[str], *, repo_dir: Path, git_path: str | None = None) -> list[str]:
    """Build a git command rooted at ``repo_dir``.

    Example:
        >>> git_command(["status"], repo_dir=Path("/repo"))
        ['git', '-C', '/repo', 'status']
    """
    resolved = git_path.strip() if isinstance(git_path, str) else ""
    if not resolved:
        resolved = "git"
    return [resolved, "-C", str(repo_dir), *args]


def describe_status(code: str) -> str:
    """Map a two-letter porcelain status code to a readable label.

    Example:
        >>> describe_status(" M")
        'Modified'
        >>> describe_status("??")
        'Untracked'
        >>> describe_status("UU")
        'UU'
    """
    if code == "??":
        return "Untracked"
    index_code = code[:1]
    worktree_code = code[1:2]
    primary = index_code if index_code.strip() else worktree_code
    return _STATUS_LABELS.get(primary, code.strip() or code)


def parse_status_line(line: str) -> FileChange | None:
    """Parse a porcelain v1 status line into a ``FileChange``.

    Example:
        >>> parse_status_line("R  old.txt -> new.txt")
        FileChange(status='Renamed', file='new.txt')
    """
    if len(line) < 4:
        return None
    code = line[:2]
    path = line[3:]
    if " -> " in path:
        path = path.split(" -> ", 1)[1]
    path = path.strip()
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        path = path[1:-1]
    if not path:
        return None
    return FileChange(status=describe_status(code), file=path)


def _main_branch_candidates(hint: str | None) -> list[str]:
    candidates: list[str] = []
    if hint and hint.strip():
        candidates.append(hint.strip())
    for name in MAIN_BRANCH_CANDIDATES:
        if name not in candidates:
            candidates.append(name)
    return candidates


def _parse_epoch(raw: str) -> dt.datetime | None:
    token = raw.strip().split(" ", 1)[0] if raw.strip() else ""
    if not token:
        return None
    try:
        return dt.datetime.fromtimestamp(int(token), tz=dt.timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


class Git:
    """Git client bound to a command runner.

    Construct once per process and share; the instance holds no repository
    state of its own.
    """

    def __init__(
        self,
        runner: exec_util.CommandRunner | None = None,
        *,
        git_path: str | None = None,
        remote: str = DEFAULT_REMOTE,
    ) -> None:
        self._runner = runner or exec_util.default_runner()
        self._git_path = git_path
        self.remote = remote

    def _run(self, repo_dir: Path, args: list[str]) -> exec_util.CommandResult | None:
        argv = tuple(git_command(args, repo_dir=repo_dir, git_path=self._git_path))
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
        return self._runner.run(exec_util.CommandRequest(argv=argv, cwd=repo_dir, env=env))

    def _query(self, repo_dir: Path, args: list[str]) -> str | None:
        """Run a read-only query and return stdout, or ``None`` on any failure."""
        try:
            result = self._run(repo_dir, args)
        except OSError:
            return None
        if result is None or not result.ok:
            return None
        return result.stdout

    def _mutate(self, repo_dir: Path, args: list[str]) -> GitOutcome:
        argv = tuple(git_command(args, repo_dir=repo_dir, git_path=self._git_path))
        try:
            result = self._run(repo_dir, args)
        except OSError as exc:
            return GitOutcome(success=False, error=str(exc))
        if result is None or not result.ok:
            return GitOutcome(success=False, error=exec_util.failure_detail(argv, result))
        return GitOutcome(success=True, output=result.stdout.strip())

    # Queries

    def is_repository(self, repo_dir: Path) -> bool:
        """Return whether ``repo_dir`` is inside a git work tree.

        Any failure, including a missing git executable or an unreadable
        directory, reads as ``False``.
        """
        output = self._query(repo_dir, ["rev-parse", "--is-inside-work-tree"])
        return output is not None and output.strip() == "true"

    def ref_exists(self, repo_dir: Path, ref: str) -> bool:
        return self._query(repo_dir, ["show-ref", "--verify", "--quiet", ref]) is not None

    def branch_exists(self, repo_dir: Path, branch: str) -> bool:
        """Return whether a local branch named ``branch`` exists."""
        if not branch:
            return False
        return self.ref_exists(repo_dir, f"refs/heads/{branch}")

    def locate_main_branch(
        self, repo_dir: Path, hint: str | None = None
    ) -> tuple[str, str] | None:
        """Return ``(branch, ref)`` for the main branch, or ``None``.

        Candidates are ``hint``, develop, main, master. Every candidate is
        tried as a local branch before any is tried on the default remote.
        ``ref`` is what revision queries should use: the branch itself, or
        ``<remote>/<branch>`` when it only exists remotely.
        """
        candidates = _main_branch_candidates(hint)
        for name in candidates:
            if self.branch_exists(repo_dir, name):
                return name, name
        for name in candidates:
            if self.ref_exists(repo_dir, f"refs/remotes/{self.remote}/{name}"):
                return name, f"{self.remote}/{name}"
        return None

    def resolve_main_branch(self, repo_dir: Path, hint: str | None = None) -> str | None:
        """Return the main branch name; a remote-only match is returned bare."""
        located = self.locate_main_branch(repo_dir, hint)
        return located[0] if located else None

    def current_branch(self, repo_dir: Path) -> str | None:
        """Return the checked-out branch, or ``None`` when detached or unknown."""
        output = self._query(repo_dir, ["branch", "--show-current"])
        if output is None:
            return None
        return output.strip() or None

    def status_lines(self, repo_dir: Path) -> list[str] | None:
        output = self._query(repo_dir, ["status", "--porcelain"])
        if output is None:
            return None
        return [line for line in output.splitlines() if line.strip()]

    def changeset(self, repo_dir: Path) -> list[FileChange]:
        """Return uncommitted changes in the working tree."""
        changes: list[FileChange] = []
        for line in self.status_lines(repo_dir) or []:
            change = parse_status_line(line)
            if change is not None:
                changes.append(change)
        return changes

    def has_uncommitted_changes(self, repo_dir: Path) -> bool:
        return bool(self.status_lines(repo_dir))

    def divergence(self, repo_dir: Path, main_branch: str) -> Divergence:
        """Count commits between ``HEAD`` and ``main_branch`` in both directions."""
        output = self._query(
            repo_dir, ["rev-list", "--left-right", "--count", f"{main_branch}...HEAD"]
        )
        if output is None:
            return Divergence()
        parts = output.split()
        if len(parts) != 2:
            return Divergence()
        try:
            behind, ahead = (max(0, int(part)) for part in parts)
        except ValueError:
            return Divergence()
        return Divergence(ahead=ahead, behind=behind)

    def rev_parse(self, repo_dir: Path, ref: str) -> str | None:
        output = self._query(repo_dir, ["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        if output is None:
            return None
        return output.strip() or None

    def merge_base(self, repo_dir: Path, base: str, branch: str) -> str | None:
        output = self._query(repo_dir, ["merge-base", base, branch])
        if output is None:
            return None
        return output.strip() or None

    def commit_time(self, repo_dir: Path, ref: str) -> dt.datetime | None:
        """Return the committer time of ``ref`` in UTC."""
        output = self._query(repo_dir, ["log", "-1", "--format=%ct", ref])
        if output is None:
            return None
        return _parse_epoch(output)

    def last_sync_from_main(self, repo_dir: Path, main_branch: str) -> dt.datetime | None:
        """Return when ``HEAD`` last incorporated ``main_branch``.

        That is the commit time of their merge base. When ``HEAD`` is the
        same commit as ``main_branch`` this is main's latest commit time.
        """
        head = self.rev_parse(repo_dir, "HEAD")
        main = self.rev_parse(repo_dir, main_branch)
        if head is None or main is None:
            return None
        if head == main:
            return self.commit_time(repo_dir, main_branch)
        base = self.merge_base(repo_dir, "HEAD", main_branch)
        if base is None:
            return None
        return self.commit_time(repo_dir, base)

    def refresh_remotes(self, repo_dir: Path) -> bool:
        """Prune and fetch remote refs without merging anything."""
        return self._query(repo_dir, ["fetch", "--all", "--prune", "--quiet"]) is not None

    def remote_branches(self, repo_dir: Path) -> list[RemoteBranch]:
        """Return every remote-tracking branch with its latest commit time.

        Symbolic ``<remote>/HEAD`` entries are skipped.
        """
        output = self._query(
            repo_dir,
            [
                "for-each-ref",
                "--format=%(refname)%09%(refname:short)%09%(committerdate:raw)",
                "refs/remotes",
            ],
        )
        if output is None:
            return []
        branches: list[RemoteBranch] = []
        for line in output.splitlines():
            parts = line.split("\t")
            if len(parts) < 2:
                continue
            full_ref, short_ref = parts[0].strip(), parts[1].strip()
            if not short_ref or full_ref.endswith("/HEAD"):
                continue
            date = _parse_epoch(parts[2]) if len(parts) > 2 else None
            branches.append(RemoteBranch(branch=short_ref, last_commit_date=date))
        return branches

    def local_branches_with_upstream(
        self, repo_dir: Path, prefix: str = ""
    ) -> list[tuple[str, str | None]]:
        """Return ``(branch, upstream)`` pairs for local branches under ``prefix``.

        ``upstream`` is ``None`` when no tracking branch is configured.
        """
        pattern = "refs/heads"
        if prefix:
            pattern = f"refs/heads/{prefix.rstrip('/')}"
        output = self._query(
            repo_dir,
            ["for-each-ref", "--format=%(refname:short)%09%(upstream:short)", pattern],
        )
        if output is None:
            return []
        pairs: list[tuple[str, str | None]] = []
        for line in output.splitlines():
            branch, _, upstream = line.partition("\t")
            branch = branch.strip()
            if not branch or (prefix and not branch.startswith(prefix)):
                continue
            pairs.append((branch, upstream.strip() or None))
        return pairs

    # Mutations

    def checkout(self, repo_dir: Path, branch: str) -> GitOutcome:
        return self._mutate(repo_dir, ["checkout", branch])

    def create_branch(self, repo_dir: Path, branch: str) -> GitOutcome:
        """Create ``branch`` from ``HEAD`` and check it out."""
        return self._mutate(repo_dir, ["checkout", "-b", branch])

    def checkout_tracking(self, repo_dir: Path, local_branch: str, remote_branch: str) -> GitOutcome:
        """Create ``local_branch`` from ``remote_branch`` with upstream tracking."""
        return self._mutate(repo_dir, ["checkout", "-b", local_branch, "--track", remote_branch])

    def stash(self, repo_dir: Path, message: str) -> GitOutcome:
        """Stash tracked and untracked changes under ``message``."""
        return self._mutate(repo_dir, ["stash", "push", "--include-untracked", "-m", message])

    def pull_rebase(self, repo_dir: Path) -> GitOutcome:
        return self._mutate(repo_dir, ["pull", "--rebase"])

    def reset_hard(self, repo_dir: Path) -> GitOutcome:
        return self._mutate(repo_dir, ["reset", "--hard", "HEAD"])

    def clean_untracked(self, repo_dir: Path) -> GitOutcome:
        return self._mutate(repo_dir, ["clean", "-fd"])
