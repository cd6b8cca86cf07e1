"""Web toolchain adapters: Vite, Next.js and React Router."""

from __future__ import annotations

from pathlib import Path

from .. import exec as exec_util
from ..models import OperationResult
from .base import ToolchainAdapter, script_command


class ViteAdapter(ToolchainAdapter):
    name = "vite"
    display_name = "Vite"
    cache_dirs = ("node_modules/.vite",)

    def build_args(self, mode: str) -> list[str]:
        if mode == "development":
            return ["--mode", "development"]
        return []


class NextJSAdapter(ToolchainAdapter):
    name = "nextjs"
    display_name = "Next.js"
    cache_dirs = (".next",)

    def build_args(self, mode: str) -> list[str]:
        if mode == "development":
            return ["--debug"]
        return []


class ReactRouterAdapter(ToolchainAdapter):
    """React Router v7 adapter.

    The build picks its mode from ``NODE_ENV``, so no mode flag is passed, and
    a project without a ``test`` script passes the test step.
    """

    name = "react-router"
    display_name = "React Router"
    cache_dirs = ("build", ".react-router")

    def test_args(self, test_file: str | None, coverage: bool) -> list[str]:
        args: list[str] = []
        if test_file:
            args.append(test_file)
        if coverage:
            args.append("--coverage")
        return args

    def test(
        self, working_dir: Path, test_file: str | None = None, coverage: bool = False
    ) -> OperationResult:
        pm = self.detect_package_manager(working_dir)
        request = exec_util.CommandRequest(
            argv=tuple(script_command(pm, "test", self.test_args(test_file, coverage))),
            cwd=working_dir,
        )
        result = self._runner.run(request)
        if result is not None and result.ok:
            return OperationResult.ok("Tests completed successfully")
        if result is not None and "Missing script" in result.stderr:
            return OperationResult.ok("No test script found - skipping")
        return OperationResult.failed("Tests failed", exec_util.failure_detail(request.argv, result))
