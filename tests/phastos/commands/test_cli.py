import json
import re
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

import phastos.cli as cli
import phastos.config as config
from phastos.engine import Engine
from tests.phastos.helpers import FakeRunner, scripted_repo

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


def _strip_ansi(output: str) -> str:
    return ANSI_ESCAPE_RE.sub("", output)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    project_dir = tmp_path / "shop"
    project_dir.mkdir()
    payload = {
        "version": "1.0",
        "projects": [
            {
                "name": "shop",
                "workingDirectory": "shop",
                "configuration": {"toolchain": "vite", "defaultBranch": "main"},
                "customCommands": [
                    {
                        "alias": "ship",
                        "operations": [
                            {"type": "install"},
                            {"type": "build"},
                            {"type": "test"},
                        ],
                    }
                ],
            }
        ],
    }
    path = tmp_path / config.CONFIG_FILE_NAME
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def _use_runner(runner: FakeRunner):
    return patch(
        "phastos.commands.resolve.Engine",
        SimpleNamespace(default=lambda: Engine.default(runner)),
    )


def _invoke(config_path: Path, *args: str):
    return CliRunner().invoke(cli.app, ["--config", str(config_path), *args])


class TestGlobalOptions:
    def test_log_level_flag_sets_runtime_level(self) -> None:
        with (
            patch("phastos.cli.status_cmd", lambda _args: None),
            patch("phastos.cli.phastos_log.set_level") as mock_set_level,
        ):
            result = CliRunner().invoke(cli.app, ["--log-level", "debug", "status", "shop"])

        assert result.exit_code == 0
        mock_set_level.assert_called_once_with("debug")

    def test_log_level_rejects_unknown_values(self) -> None:
        result = CliRunner().invoke(
            cli.app, ["--log-level", "loud", "status", "shop"], color=False
        )
        clean_output = _strip_ansi(result.output)

        assert result.exit_code != 0
        assert "--log-level" in clean_output
        assert "expected one of" in clean_output.lower()

    def test_no_color_flag(self) -> None:
        with (
            patch("phastos.cli.status_cmd", lambda _args: None),
            patch("phastos.cli.phastos_log.set_no_color") as mock_set_no_color,
        ):
            result = CliRunner().invoke(cli.app, ["--no-color", "status", "shop"])

        assert result.exit_code == 0
        mock_set_no_color.assert_called_once_with(True)

    def test_config_option_reaches_commands(self, tmp_path: Path) -> None:
        captured: dict[str, object] = {}

        def fake_switch(args: SimpleNamespace) -> None:
            captured.update(vars(args))

        with patch("phastos.cli.switch_cmd", fake_switch):
            result = CliRunner().invoke(
                cli.app,
                ["--config", str(tmp_path / "p.json"), "switch", "shop", "origin/x", "--remote"],
            )

        assert result.exit_code == 0
        assert captured == {
            "config": tmp_path / "p.json",
            "project": "shop",
            "branch": "origin/x",
            "remote": True,
        }


def test_list_prints_projects(config_path: Path) -> None:
    result = _invoke(config_path, "list")

    assert result.exit_code == 0
    assert "shop" in result.output
    assert "vite" in result.output


def test_unknown_project_exits_with_error(config_path: Path) -> None:
    result = _invoke(config_path, "status", "nope")

    assert result.exit_code == 1
    assert "unknown project 'nope'" in result.output


def test_missing_config_reports_hint(tmp_path: Path) -> None:
    result = _invoke(tmp_path / "missing.json", "list")

    assert result.exit_code == 1
    assert "phastos init" in result.output


def test_undecodable_config_reports_error(tmp_path: Path) -> None:
    path = tmp_path / config.CONFIG_FILE_NAME
    path.write_bytes(b"\xff\xfe{}")

    result = _invoke(path, "list")

    assert result.exit_code == 1
    assert "invalid JSON in" in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)


def test_status_json(config_path: Path) -> None:
    runner = scripted_repo(current_branch="main", status="?? new.ts\n")

    with _use_runner(runner):
        result = _invoke(config_path, "status", "shop", "--format", "json")

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["project"] == "shop"
    assert payload["current_branch"] == "main"
    assert payload["is_main_branch"] is True
    assert payload["uncommitted_changes"] == [{"status": "Untracked", "file": "new.ts"}]


def test_status_table(config_path: Path) -> None:
    runner = scripted_repo(current_branch="main")

    with _use_runner(runner):
        result = _invoke(config_path, "status", "shop")

    assert result.exit_code == 0
    assert "Repository Status" in result.output
    assert "No local changesets." in result.output


def test_status_outside_repository(config_path: Path) -> None:
    with _use_runner(scripted_repo(is_repository=False)):
        result = _invoke(config_path, "status", "shop")

    assert result.exit_code == 1
    assert "not a git repository" in result.output


def test_changesets_json(config_path: Path) -> None:
    runner = scripted_repo()
    runner.on("for-each-ref", "refs/heads/changeset", stdout="changeset/a\torigin/changeset/a\n")
    runner.on(
        "for-each-ref",
        "refs/remotes",
        stdout=(
            "refs/remotes/origin/changeset/a\torigin/changeset/a\t1700000000 +0000\n"
            "refs/remotes/origin/changeset/b\torigin/changeset/b\t1700000000 +0000\n"
        ),
    )

    with _use_runner(runner):
        result = _invoke(config_path, "changesets", "shop", "--format", "json")

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["local_changesets"] == [
        {"branch": "changeset/a", "tracking_branch": "origin/changeset/a"}
    ]
    assert [item["branch"] for item in payload["unsynced_remote_branches"]] == [
        "origin/changeset/b"
    ]


def test_run_operation_with_params(config_path: Path) -> None:
    runner = FakeRunner()

    with _use_runner(runner):
        result = _invoke(config_path, "run", "shop", "build", "--param", "mode=development")

    assert result.exit_code == 0
    assert runner.argvs == [("npm", "run", "build", "--", "--mode", "development")]


def test_run_operation_failure_exits_non_zero(config_path: Path) -> None:
    runner = FakeRunner().on("npm", returncode=1, stderr="ERESOLVE")

    with _use_runner(runner):
        result = _invoke(config_path, "run", "shop", "install")

    assert result.exit_code == 1
    assert "ERESOLVE" in result.output


def test_run_rejects_unknown_operation(config_path: Path) -> None:
    result = _invoke(config_path, "run", "shop", "deploy")

    assert result.exit_code == 1
    assert "Unknown operation type: deploy" in result.output


def test_run_rejects_malformed_param(config_path: Path) -> None:
    result = _invoke(config_path, "run", "shop", "build", "--param", "mode")

    assert result.exit_code == 1
    assert "expected KEY=VALUE" in result.output


def test_custom_stops_on_failure(config_path: Path) -> None:
    runner = FakeRunner().on("build", returncode=2, stderr="type error")

    with _use_runner(runner):
        result = _invoke(config_path, "custom", "shop", "ship")

    assert result.exit_code == 1
    assert "Custom command 'ship' failed (1/3 steps passed)" in result.output
    assert "skipped 1 remaining step(s)" in result.output
    assert len(runner.calls) == 2


def test_custom_continue_on_error(config_path: Path) -> None:
    runner = FakeRunner().on("build", returncode=2, stderr="type error")

    with _use_runner(runner):
        result = _invoke(config_path, "custom", "shop", "ship", "--continue-on-error")

    assert result.exit_code == 1
    assert len(runner.calls) == 3


def test_custom_unknown_alias(config_path: Path) -> None:
    result = _invoke(config_path, "custom", "shop", "deploy")

    assert result.exit_code == 1
    assert "available: ship" in result.output


def test_fresh_passes_changeset_name(config_path: Path) -> None:
    runner = scripted_repo(current_branch="main")

    with _use_runner(runner):
        result = _invoke(config_path, "fresh", "shop", "checkout-flow")

    assert result.exit_code == 0
    assert "Changeset created/started successfully" in result.output
    assert ("checkout", "-b", "changeset/checkout-flow") in runner.git_calls()


def test_switch_remote(config_path: Path) -> None:
    runner = scripted_repo()

    with _use_runner(runner):
        result = _invoke(config_path, "switch", "shop", "origin/changeset/foo", "--remote")

    assert result.exit_code == 0
    assert "Switched to changeset/foo" in result.output


def test_init_writes_config_once(tmp_path: Path) -> None:
    path = tmp_path / config.CONFIG_FILE_NAME

    first = _invoke(path, "init", "--name", "shop", "--working-directory", "./shop")
    second = _invoke(path, "init")

    assert first.exit_code == 0
    assert config.load_projects_config(path).projects[0].name == "shop"
    assert second.exit_code == 1
    assert "already exists" in second.output
