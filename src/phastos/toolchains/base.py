"""Shared toolchain adapter types and package-manager helpers."""

from __future__ import annotations

import shutil
from pathlib import Path

from .. import exec as exec_util
from .. import log
from ..models import OperationResult

# Checked in order; the first lock/config file present wins.
LOCK_FILES = (
    ("deno.json", "deno"),
    ("deno.jsonc", "deno"),
    ("bun.lockb", "bun"),
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
)
DEFAULT_PACKAGE_MANAGER = "npm"

DEVELOPMENT_MODES = frozenset({"debug", "development", "dev"})
RELEASE_MODES = frozenset({"release", "production", "prod"})


def detect_package_manager(working_dir: Path) -> str:
    """Return the package manager implied by lock files in ``working_dir``."""
    for filename, manager in LOCK_FILES:
        try:
            if (working_dir / filename).is_file():
                return manager
        except OSError:
            continue
    return DEFAULT_PACKAGE_MANAGER


def script_command(package_manager: str, script: str, extra: list[str] | None = None) -> list[str]:
    """Build the argv that runs a package.json script.

    Example:
        >>> script_command("npm", "test", ["--coverage"])
        ['npm', 'run', 'test', '--', '--coverage']
        >>> script_command("yarn", "build")
        ['yarn', 'build']
        >>> script_command("deno", "dev")
        ['deno', 'task', 'dev']
    """
    args = list(extra or [])
    if package_manager == "npm":
        return ["npm", "run", script, *(["--", *args] if args else [])]
    if package_manager in {"yarn", "pnpm"}:
        return [package_manager, script, *args]
    if package_manager == "bun":
        return ["bun", "run", script, *args]
    if package_manager == "deno":
        return ["deno", "task", script, *args]
    raise ValueError(f"unsupported package manager: {package_manager}")


class ToolchainAdapter:
    """Base adapter for JavaScript project toolchains.

    Subclasses override the steps that differ per toolchain; every method
    returns an ``OperationResult`` and reports command failures through it.
    """

    name = "node"
    display_name = "Node"
    default_mode = "production"
    cache_dirs: tuple[str, ...] = ()

    def __init__(self, runner: exec_util.CommandRunner | None = None) -> None:
        self._runner = runner or exec_util.default_runner()

    def detect_package_manager(self, working_dir: Path) -> str:
        return detect_package_manager(working_dir)

    def _package_manager(self, working_dir: Path, package_manager: str | None) -> str:
        return package_manager or self.detect_package_manager(working_dir)

    def _execute(
        self,
        argv: list[str],
        working_dir: Path,
        *,
        success_message: str,
        failure_message: str,
    ) -> OperationResult:
        request = exec_util.CommandRequest(argv=tuple(argv), cwd=working_dir)
        result = self._runner.run(request)
        if result is None or not result.ok:
            return OperationResult.failed(
                failure_message, exec_util.failure_detail(request.argv, result)
            )
        return OperationResult.ok(success_message)

    def is_development(self, mode: str | None) -> bool:
        return (mode or self.default_mode).strip().lower() in DEVELOPMENT_MODES

    def install(self, working_dir: Path, package_manager: str | None = None) -> OperationResult:
        pm = self._package_manager(working_dir, package_manager)
        return self._execute(
            [pm, "install"],
            working_dir,
            success_message=f"Dependencies installed using {pm}",
            failure_message=f"Failed to install dependencies using {pm}",
        )

    def build(
        self, working_dir: Path, mode: str | None = None, platform: str | None = None
    ) -> OperationResult:
        del platform
        pm = self.detect_package_manager(working_dir)
        resolved_mode = "development" if self.is_development(mode) else "production"
        return self._execute(
            script_command(pm, "build", self.build_args(resolved_mode)),
            working_dir,
            success_message=f"{self.display_name} build completed in {resolved_mode} mode",
            failure_message=f"{self.display_name} build failed",
        )

    def build_args(self, mode: str) -> list[str]:
        del mode
        return []

    def run(
        self,
        working_dir: Path,
        platform: str | None = None,
        device: str | None = None,
        mode: str | None = None,
    ) -> OperationResult:
        del platform, device, mode
        pm = self.detect_package_manager(working_dir)
        return self._execute(
            script_command(pm, "dev"),
            working_dir,
            success_message=f"{self.display_name} dev server started",
            failure_message=f"{self.display_name} dev server failed",
        )

    def test_args(self, test_file: str | None, coverage: bool) -> list[str]:
        args = ["--run"]
        if test_file:
            args.append(test_file)
        if coverage:
            args.append("--coverage")
        return args

    def test(
        self, working_dir: Path, test_file: str | None = None, coverage: bool = False
    ) -> OperationResult:
        pm = self.detect_package_manager(working_dir)
        return self._execute(
            script_command(pm, "test", self.test_args(test_file, coverage)),
            working_dir,
            success_message="Tests completed successfully",
            failure_message="Tests failed",
        )

    def reset(self, working_dir: Path) -> OperationResult:
        """Delete the toolchain's cache directories; missing ones are skipped."""
        for relative in self.cache_dirs:
            target = working_dir / relative
            if not target.exists():
                continue
            log.debug(f"Removing {target}")
            try:
                shutil.rmtree(target)
            except OSError as exc:
                return OperationResult.failed(f"Failed to clear {relative}", str(exc))
        return OperationResult.ok(f"{self.display_name} cache cleared")

    def run_script(
        self, working_dir: Path, script_name: str, package_manager: str | None = None
    ) -> OperationResult:
        pm = self._package_manager(working_dir, package_manager)
        try:
            argv = script_command(pm, script_name)
        except ValueError as exc:
            return OperationResult.failed(f"Unsupported package manager: {pm}", str(exc))
        return self._execute(
            argv,
            working_dir,
            success_message=f"Script '{script_name}' completed successfully using {pm}",
            failure_message=f"Script '{script_name}' failed",
        )

    def pod_install(self, working_dir: Path) -> OperationResult:
        del working_dir
        return OperationResult.failed(
            f"pod install is not supported for {self.display_name} projects"
        )

    def execute_custom_command(self, command: str, working_dir: Path) -> OperationResult:
        """Run ``command`` through ``sh -c`` and report its stdout."""
        request = exec_util.CommandRequest(argv=("sh", "-c", command), cwd=working_dir)
        result = self._runner.run(request)
        if result is None or not result.ok:
            return OperationResult.failed(
                "Custom command failed", exec_util.failure_detail(request.argv, result)
            )
        return OperationResult.ok(result.stdout.strip() or "Custom command executed")
