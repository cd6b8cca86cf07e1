# ruff: noqa: E402

from __future__ import annotations

import sys
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from phastos import exec as exec_util
from phastos.models import Project

REPO = Path("/repo")


@dataclass
class _Scripted:
    fragment: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    missing: bool
    timed_out: bool
    once: bool


def _matches(argv: tuple[str, ...], fragment: tuple[str, ...]) -> bool:
    """Return whether ``fragment`` is an ordered subsequence of ``argv``."""
    remaining = iter(argv)
    return all(any(token == item for item in remaining) for token in fragment)


class FakeRunner:
    """Command runner that answers from scripted responses.

    The most recently registered matching response wins; unmatched commands
    exit with ``default_returncode`` and no output.
    """

    def __init__(self, *, default_returncode: int = 0) -> None:
        self.calls: list[exec_util.CommandRequest] = []
        self._scripted: list[_Scripted] = []
        self._default_returncode = default_returncode

    def on(
        self,
        *fragment: str,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        missing: bool = False,
        timed_out: bool = False,
        once: bool = False,
    ) -> FakeRunner:
        self._scripted.append(
            _Scripted(fragment, returncode, stdout, stderr, missing, timed_out, once)
        )
        return self

    def run(self, request: exec_util.CommandRequest) -> exec_util.CommandResult | None:
        self.calls.append(request)
        for scripted in reversed(self._scripted):
            if not _matches(request.argv, scripted.fragment):
                continue
            if scripted.once:
                self._scripted.remove(scripted)
            if scripted.missing:
                return None
            return exec_util.CommandResult(
                argv=request.argv,
                returncode=124 if scripted.timed_out else scripted.returncode,
                stdout=scripted.stdout,
                stderr=scripted.stderr,
                timed_out=scripted.timed_out,
            )
        return exec_util.CommandResult(
            argv=request.argv, returncode=self._default_returncode, stdout="", stderr=""
        )

    @property
    def argvs(self) -> list[tuple[str, ...]]:
        return [call.argv for call in self.calls]

    def git_calls(self) -> list[tuple[str, ...]]:
        """Git subcommands issued, without the ``git -C <dir>`` prefix."""
        return [argv[3:] for argv in self.argvs if argv[:2] == ("git", "-C")]

    def count(self, *fragment: str) -> int:
        return sum(1 for argv in self.argvs if _matches(argv, fragment))


def scripted_repo(
    *,
    current_branch: str | None = "main",
    local_branches: Iterable[str] = ("main",),
    remote_refs: Iterable[str] = (),
    status: str = "",
    is_repository: bool = True,
) -> FakeRunner:
    """Build a runner that behaves like a git repository.

    ``local_branches`` and ``remote_refs`` (``origin/<name>``) answer
    ``show-ref`` probes; every other ref is reported missing. Mutating git
    commands succeed unless a test scripts otherwise.
    """
    runner = FakeRunner()
    runner.on(
        "rev-parse",
        "--is-inside-work-tree",
        stdout="true\n" if is_repository else "",
        returncode=0 if is_repository else 128,
    )
    runner.on("branch", "--show-current", stdout=f"{current_branch or ''}\n")
    runner.on("status", "--porcelain", stdout=status)
    runner.on("show-ref", returncode=1)
    for branch in local_branches:
        runner.on("show-ref", f"refs/heads/{branch}")
    for ref in remote_refs:
        runner.on("show-ref", f"refs/remotes/{ref}")
    runner.on("for-each-ref", "refs/remotes", stdout="")
    runner.on("for-each-ref", "refs/heads/changeset", stdout="")
    return runner


def make_project(
    working_directory: Path = REPO,
    *,
    name: str = "app",
    toolchain: str = "react-native",
    **configuration: object,
) -> Project:
    return Project.model_validate(
        {
            "name": name,
            "workingDirectory": str(working_directory),
            "configuration": {"toolchain": toolchain, **configuration},
        }
    )
