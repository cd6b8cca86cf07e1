"""Toolchain adapters for building, running and testing projects."""

from __future__ import annotations

from .. import exec as exec_util
from .base import ToolchainAdapter, detect_package_manager, script_command
from .react_native import ReactNativeAdapter
from .web import NextJSAdapter, ReactRouterAdapter, ViteAdapter

__all__ = [
    "NextJSAdapter",
    "ReactNativeAdapter",
    "ReactRouterAdapter",
    "ToolchainAdapter",
    "ToolchainRegistry",
    "ViteAdapter",
    "detect_package_manager",
    "script_command",
]

DEFAULT_TOOLCHAIN = ReactNativeAdapter.name


class ToolchainRegistry:
    """Adapters keyed by toolchain id, sharing one command runner.

    Unknown ids resolve to the React Native adapter.
    """

    def __init__(self, runner: exec_util.CommandRunner | None = None) -> None:
        shared = runner or exec_util.default_runner()
        adapters: list[ToolchainAdapter] = [
            ReactNativeAdapter(shared),
            ViteAdapter(shared),
            NextJSAdapter(shared),
            ReactRouterAdapter(shared),
        ]
        self._adapters = {adapter.name: adapter for adapter in adapters}

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._adapters)

    def resolve(self, toolchain: str | None) -> ToolchainAdapter:
        key = (toolchain or "").strip().lower()
        return self._adapters.get(key) or self._adapters[DEFAULT_TOOLCHAIN]
