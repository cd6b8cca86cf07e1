# ruff: noqa: E402

import sys
from pathlib import Path

import pytest
from _pytest.doctest import DoctestModule

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import phastos.log as phastos_log

DOCTEST_MODULES = {
    ROOT / "src" / "phastos" / "__init__.py",
    ROOT / "src" / "phastos" / "changesets.py",
    ROOT / "src" / "phastos" / "config.py",
    ROOT / "src" / "phastos" / "git.py",
    ROOT / "src" / "phastos" / "io.py",
    ROOT / "src" / "phastos" / "log.py",
    ROOT / "src" / "phastos" / "models.py",
    ROOT / "src" / "phastos" / "orchestrator.py",
    ROOT / "src" / "phastos" / "services" / "errors.py",
    ROOT / "src" / "phastos" / "toolchains" / "base.py",
    ROOT / "src" / "phastos" / "commands" / "run.py",
}


@pytest.fixture(autouse=True)
def _reset_log_state(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PHASTOS_LOG_LEVEL", raising=False)
    monkeypatch.delenv("PHASTOS_COMMAND_TIMEOUT", raising=False)
    phastos_log.reset()
    yield
    phastos_log.reset()


def pytest_collect_file(
    parent: pytest.Collector, file_path: Path
) -> DoctestModule | None:
    path = file_path if isinstance(file_path, Path) else Path(str(file_path))
    if path in DOCTEST_MODULES:
        return DoctestModule.from_parent(parent, path=path)
    return None
