"""Ordered execution of operation sequences and custom commands."""

from __future__ import annotations

from collections.abc import Sequence

from . import log
from .executor import OperationExecutor
from .models import CustomCommand, Operation, OperationResult, Project


def aggregate_results(
    alias: str, results: Sequence[OperationResult], total: int | None = None
) -> OperationResult:
    """Fold a custom command's step results into one result.

    ``total`` is the number of steps in the command; it defaults to the number
    of results, which is shorter when a failure stopped the run. ``error`` is
    the first failing step's error.

    Example:
        >>> aggregate_results("ship", [OperationResult.ok("a")]).message
        "Custom command 'ship' completed successfully"
        >>> failed = aggregate_results(
        ...     "ship", [OperationResult.ok("a"), OperationResult.failed("b", "boom")], 5
        ... )
        >>> failed.message
        "Custom command 'ship' failed (1/5 steps passed)"
        >>> failed.success, failed.error
        (False, 'boom')
    """
    first_failure = next((result for result in results if not result.success), None)
    if first_failure is None:
        return OperationResult.ok(f"Custom command '{alias}' completed successfully")
    passed = sum(1 for result in results if result.success)
    steps = len(results) if total is None else total
    return OperationResult.failed(
        f"Custom command '{alias}' failed ({passed}/{steps} steps passed)",
        first_failure.error,
    )


class SequenceOrchestrator:
    """Runs operations strictly in order, one at a time."""

    def __init__(self, executor: OperationExecutor) -> None:
        self._executor = executor

    def execute_sequence(
        self,
        operations: Sequence[Operation],
        project: Project,
        continue_on_error: bool = False,
    ) -> list[OperationResult]:
        """Execute ``operations`` and return one result per executed step.

        Without ``continue_on_error`` the first failure ends the run and is the
        last element of the returned list.
        """
        results: list[OperationResult] = []
        total = len(operations)
        for index, operation in enumerate(operations, start=1):
            log.debug(f"[{index}/{total}] {operation.label}")
            result = self._executor.execute(operation, project)
            results.append(result)
            if not result.success and not continue_on_error:
                if index < total:
                    log.warning(f"Stopping after failed step {index} of {total}")
                break
        return results

    def execute_custom_command(
        self, command: CustomCommand, project: Project, continue_on_error: bool = False
    ) -> tuple[OperationResult, list[OperationResult]]:
        results = self.execute_sequence(command.operations, project, continue_on_error)
        return (
            aggregate_results(command.alias, results, len(command.operations)),
            results,
        )
