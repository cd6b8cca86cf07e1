"""Public entry point wiring git, toolchains, executor and orchestrator."""

from __future__ import annotations

from collections.abc import Sequence

from . import exec as exec_util
from .changesets import ChangesetInventory, ChangesetResolver
from .executor import OperationExecutor
from .git import Git
from .models import CustomCommand, Operation, OperationResult, Project
from .orchestrator import SequenceOrchestrator
from .repository import RepositoryInspector, RepositoryState
from .toolchains import ToolchainRegistry


class Engine:
    """Facade over the operation and inspection components.

    Build one per process with ``Engine.default()`` or inject collaborators
    directly in tests.
    """

    def __init__(
        self,
        git: Git,
        executor: OperationExecutor,
        *,
        orchestrator: SequenceOrchestrator | None = None,
        inspector: RepositoryInspector | None = None,
        resolver: ChangesetResolver | None = None,
    ) -> None:
        self.git = git
        self.executor = executor
        self.orchestrator = orchestrator or SequenceOrchestrator(executor)
        self.resolver = resolver or ChangesetResolver(git)
        self.inspector = inspector or RepositoryInspector(git, self.resolver)

    @classmethod
    def default(cls, runner: exec_util.CommandRunner | None = None) -> Engine:
        shared = runner or exec_util.default_runner()
        git = Git(shared)
        return cls(git, OperationExecutor(git, ToolchainRegistry(shared)))

    def execute(self, operation: Operation, project: Project) -> OperationResult:
        return self.executor.execute(operation, project)

    def execute_sequence(
        self,
        operations: Sequence[Operation],
        project: Project,
        continue_on_error: bool = False,
    ) -> list[OperationResult]:
        return self.orchestrator.execute_sequence(operations, project, continue_on_error)

    def execute_custom_command(
        self, command: CustomCommand, project: Project, continue_on_error: bool = False
    ) -> tuple[OperationResult, list[OperationResult]]:
        return self.orchestrator.execute_custom_command(command, project, continue_on_error)

    def inspect_repository_state(
        self, project: Project, *, refresh_remotes: bool = True
    ) -> RepositoryState | None:
        """Return the project's repository state, or ``None`` outside git."""
        return self.inspector.inspect(
            project.working_directory,
            default_branch=project.configuration.default_branch,
            refresh_remotes=refresh_remotes,
        )

    def resolve_changesets(
        self, project: Project, *, refresh_remotes: bool = True
    ) -> ChangesetInventory:
        return self.resolver.resolve(project.working_directory, refresh=refresh_remotes)
