"""React Native toolchain adapter."""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

from .. import exec as exec_util
from .. import log
from ..models import OperationResult
from .base import RELEASE_MODES, ToolchainAdapter, script_command

NATIVE_PLATFORMS = ("ios", "android")
# Metro keeps its transform cache in the system temp directory.
METRO_CACHE_GLOBS = ("metro-*", "haste-map-*")


class ReactNativeAdapter(ToolchainAdapter):
    name = "react-native"
    display_name = "React Native"
    default_mode = "debug"
    cache_dirs = ("node_modules/.cache",)

    def __init__(
        self, runner: exec_util.CommandRunner | None = None, *, temp_dir: Path | None = None
    ) -> None:
        super().__init__(runner)
        self._temp_dir = temp_dir

    def _platforms(self, platform: str | None) -> list[str] | None:
        resolved = (platform or "ios").lower()
        if resolved == "both":
            return list(NATIVE_PLATFORMS)
        if resolved in NATIVE_PLATFORMS:
            return [resolved]
        return None

    def _is_release(self, mode: str | None) -> bool:
        return (mode or self.default_mode).strip().lower() in RELEASE_MODES

    def _platform_args(
        self, platform: str, *, release: bool, device: str | None = None
    ) -> list[str]:
        args: list[str] = []
        if device:
            args.extend(["--simulator", device] if platform == "ios" else ["--deviceId", device])
        if release:
            args.extend(["--configuration", "Release"] if platform == "ios" else ["--mode", "release"])
        return args

    def _each_platform(
        self,
        working_dir: Path,
        platform: str | None,
        *,
        verb: str,
        release: bool,
        device: str | None = None,
    ) -> OperationResult:
        platforms = self._platforms(platform)
        if platforms is None:
            return OperationResult.failed(f"Unsupported React Native platform: {platform}")
        pm = self.detect_package_manager(working_dir)
        for target in platforms:
            result = self._execute(
                script_command(
                    pm, f"run-{target}", self._platform_args(target, release=release, device=device)
                ),
                working_dir,
                success_message=f"{target} {verb} completed",
                failure_message=f"{target} {verb} failed",
            )
            if not result.success:
                return result
        return OperationResult.ok(f"{verb.capitalize()} completed for {platform or 'ios'}")

    def build(
        self, working_dir: Path, mode: str | None = None, platform: str | None = None
    ) -> OperationResult:
        return self._each_platform(
            working_dir, platform, verb="build", release=self._is_release(mode)
        )

    def run(
        self,
        working_dir: Path,
        platform: str | None = None,
        device: str | None = None,
        mode: str | None = None,
    ) -> OperationResult:
        return self._each_platform(
            working_dir, platform, verb="run", release=self._is_release(mode), device=device
        )

    def test_args(self, test_file: str | None, coverage: bool) -> list[str]:
        args: list[str] = []
        if test_file:
            args.append(test_file)
        if coverage:
            args.append("--coverage")
        return args

    def reset(self, working_dir: Path) -> OperationResult:
        """Clear Metro and Babel caches without starting the bundler."""
        result = super().reset(working_dir)
        if not result.success:
            return result
        temp_dir = self._temp_dir or Path(tempfile.gettempdir())
        for pattern in METRO_CACHE_GLOBS:
            for cache in temp_dir.glob(pattern):
                log.debug(f"Removing {cache}")
                shutil.rmtree(cache, ignore_errors=True)
        return OperationResult.ok("React Native cache reset")

    def pod_install(self, working_dir: Path) -> OperationResult:
        ios_dir = working_dir / "ios"
        if not ios_dir.is_dir():
            return OperationResult.failed("Pod install failed", "iOS directory not found")
        return self._execute(
            ["pod", "install"],
            ios_dir,
            success_message="CocoaPods dependencies installed",
            failure_message="Pod install failed",
        )
