from pathlib import Path

import pytest

from phastos.toolchains import (
    NextJSAdapter,
    ReactNativeAdapter,
    ReactRouterAdapter,
    ToolchainRegistry,
    ViteAdapter,
    detect_package_manager,
    script_command,
)
from tests.phastos.helpers import FakeRunner


@pytest.mark.parametrize(
    ("files", "expected"),
    [
        ((), "npm"),
        (("package-lock.json",), "npm"),
        (("yarn.lock",), "yarn"),
        (("pnpm-lock.yaml", "yarn.lock"), "pnpm"),
        (("bun.lockb", "package-lock.json"), "bun"),
        (("deno.json", "bun.lockb"), "deno"),
        (("deno.jsonc",), "deno"),
    ],
)
def test_detect_package_manager(tmp_path: Path, files: tuple[str, ...], expected: str) -> None:
    for name in files:
        (tmp_path / name).write_text("", encoding="utf-8")
    assert detect_package_manager(tmp_path) == expected


def test_script_command_rejects_unknown_manager() -> None:
    with pytest.raises(ValueError, match="unsupported package manager"):
        script_command("cargo", "build")


@pytest.mark.parametrize(
    ("manager", "expected"),
    [
        ("npm", ["npm", "run", "dev"]),
        ("yarn", ["yarn", "dev"]),
        ("pnpm", ["pnpm", "dev"]),
        ("bun", ["bun", "run", "dev"]),
        ("deno", ["deno", "task", "dev"]),
    ],
)
def test_script_command_per_manager(manager: str, expected: list[str]) -> None:
    assert script_command(manager, "dev") == expected


def test_registry_resolves_known_and_falls_back() -> None:
    registry = ToolchainRegistry(FakeRunner())

    assert isinstance(registry.resolve("vite"), ViteAdapter)
    assert isinstance(registry.resolve(" NextJS "), NextJSAdapter)
    assert isinstance(registry.resolve("react-router"), ReactRouterAdapter)
    assert isinstance(registry.resolve("unknown"), ReactNativeAdapter)
    assert isinstance(registry.resolve(None), ReactNativeAdapter)
    assert registry.names == ("react-native", "vite", "nextjs", "react-router")


class TestReactNative:
    def test_build_both_runs_ios_then_android(self, tmp_path: Path) -> None:
        runner = FakeRunner()

        result = ReactNativeAdapter(runner).build(tmp_path, "release", "both")

        assert result.success is True
        assert runner.argvs == [
            ("npm", "run", "run-ios", "--", "--configuration", "Release"),
            ("npm", "run", "run-android", "--", "--mode", "release"),
        ]

    def test_build_both_stops_at_first_failure(self, tmp_path: Path) -> None:
        runner = FakeRunner().on("run-ios", returncode=65, stderr="xcodebuild failed")

        result = ReactNativeAdapter(runner).build(tmp_path, None, "both")

        assert result.success is False
        assert result.message == "ios build failed"
        assert result.error == "xcodebuild failed"
        assert len(runner.calls) == 1

    def test_web_platform_is_unsupported(self, tmp_path: Path) -> None:
        runner = FakeRunner()

        result = ReactNativeAdapter(runner).run(tmp_path, "web")

        assert result.success is False
        assert runner.calls == []

    def test_run_android_device(self, tmp_path: Path) -> None:
        (tmp_path / "yarn.lock").write_text("", encoding="utf-8")
        runner = FakeRunner()

        ReactNativeAdapter(runner).run(tmp_path, "android", "emulator-5554")

        assert runner.argvs == [("yarn", "run-android", "--deviceId", "emulator-5554")]

    def test_test_omits_run_flag(self, tmp_path: Path) -> None:
        runner = FakeRunner()

        ReactNativeAdapter(runner).test(tmp_path, "App.test.tsx", True)

        assert runner.argvs == [("npm", "run", "test", "--", "App.test.tsx", "--coverage")]

    def test_reset_clears_caches_without_running_commands(self, tmp_path: Path) -> None:
        project = tmp_path / "app"
        cache = project / "node_modules" / ".cache"
        cache.mkdir(parents=True)
        temp_dir = tmp_path / "tmp"
        (temp_dir / "metro-cache").mkdir(parents=True)
        (temp_dir / "haste-map-abc").mkdir()
        (temp_dir / "keep-me").mkdir()
        runner = FakeRunner()

        result = ReactNativeAdapter(runner, temp_dir=temp_dir).reset(project)

        assert result.success is True
        assert not cache.exists()
        assert sorted(path.name for path in temp_dir.iterdir()) == ["keep-me"]
        assert runner.calls == []

    def test_pod_install_requires_ios_directory(self, tmp_path: Path) -> None:
        runner = FakeRunner()

        result = ReactNativeAdapter(runner).pod_install(tmp_path)

        assert result.success is False
        assert result.error == "iOS directory not found"
        assert runner.calls == []

    def test_pod_install_runs_in_ios_directory(self, tmp_path: Path) -> None:
        (tmp_path / "ios").mkdir()
        runner = FakeRunner()

        result = ReactNativeAdapter(runner).pod_install(tmp_path)

        assert result.success is True
        assert runner.argvs == [("pod", "install")]
        assert runner.calls[0].cwd == tmp_path / "ios"


class TestWebToolchains:
    @pytest.mark.parametrize(
        ("adapter_cls", "mode", "expected"),
        [
            (ViteAdapter, "production", ("npm", "run", "build")),
            (ViteAdapter, "dev", ("npm", "run", "build", "--", "--mode", "development")),
            (NextJSAdapter, "debug", ("npm", "run", "build", "--", "--debug")),
            (NextJSAdapter, None, ("npm", "run", "build")),
            (ReactRouterAdapter, "development", ("npm", "run", "build")),
        ],
    )
    def test_build_mode_flags(
        self, tmp_path: Path, adapter_cls: type, mode: str | None, expected: tuple[str, ...]
    ) -> None:
        runner = FakeRunner()

        result = adapter_cls(runner).build(tmp_path, mode)

        assert result.success is True
        assert runner.argvs == [expected]

    def test_run_starts_dev_script(self, tmp_path: Path) -> None:
        (tmp_path / "pnpm-lock.yaml").write_text("", encoding="utf-8")
        runner = FakeRunner()

        ViteAdapter(runner).run(tmp_path)

        assert runner.argvs == [("pnpm", "dev")]

    @pytest.mark.parametrize(
        ("adapter_cls", "cache_dirs"),
        [
            (ViteAdapter, ["node_modules/.vite"]),
            (NextJSAdapter, [".next"]),
            (ReactRouterAdapter, ["build", ".react-router"]),
        ],
    )
    def test_reset_deletes_cache_directories(
        self, tmp_path: Path, adapter_cls: type, cache_dirs: list[str]
    ) -> None:
        for relative in cache_dirs:
            (tmp_path / relative / "chunk").mkdir(parents=True)
        (tmp_path / "src").mkdir()

        result = adapter_cls(FakeRunner()).reset(tmp_path)

        assert result.success is True
        assert all(not (tmp_path / relative).exists() for relative in cache_dirs)
        assert (tmp_path / "src").exists()

    def test_reset_with_missing_cache_succeeds(self, tmp_path: Path) -> None:
        assert NextJSAdapter(FakeRunner()).reset(tmp_path).success is True

    def test_react_router_missing_test_script_is_skipped(self, tmp_path: Path) -> None:
        runner = FakeRunner().on(
            "test", returncode=1, stderr='npm error Missing script: "test"'
        )

        result = ReactRouterAdapter(runner).test(tmp_path)

        assert result.success is True
        assert result.message == "No test script found - skipping"
        assert runner.argvs == [("npm", "run", "test")]

    def test_react_router_test_failure(self, tmp_path: Path) -> None:
        runner = FakeRunner().on("test", returncode=1, stderr="1 failed")

        result = ReactRouterAdapter(runner).test(tmp_path)

        assert result.success is False
        assert result.error == "1 failed"

    def test_custom_command_reports_stdout(self, tmp_path: Path) -> None:
        runner = FakeRunner().on("sh", stdout="")

        result = ViteAdapter(runner).execute_custom_command("true", tmp_path)

        assert result.success is True
        assert result.message == "Custom command executed"
