"""
Setup Orchestrator
==================

Drives one scaffolding run from validation to the initial commit.

The orchestrator owns the only rollback decision: on the first failed
required stage it stops, reports the error and asks whether the partially
created project should be deleted. A cancelled conflict ends the run
cleanly with nothing written.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from rich.console import Console

from .answers import BackendAPI, Frontend, Linter, ProjectAnswers
from .backend import BackendSetup
from .config import Settings, get_settings
from .conflict import ConflictAction, resolve_directory_conflict
from .core.exceptions import SetupCancelled, ValidationError, describe_error
from .core.logging import Timer, log_exception
from .core.models import ExecutionContext, Services
from .display import Spinner, show_error, show_success
from .features import run_features, selected_features
from .frontend import FrontendSetup, UILibrarySetup
from .linting import LintingSetup
from .monorepo import MonorepoSetup
from .pipeline import PipelineOutcome, Stage, StagePolicy, run_stages
from .project import (
    cleanup_project,
    create_configuration_files,
    create_initial_commit,
    initialize_git_repository,
    initialize_project,
    install_dependencies,
)
from .prompts import prompt_cleanup, prompt_conflict_action
from .validation import (
    validate_basic_requirements,
    validate_directory_availability,
    validate_package_manager,
    validate_project_name,
)

logger = logging.getLogger(__name__)

ConflictChooser = Callable[[str], ConflictAction]
CleanupConfirmer = Callable[[], bool]


class SetupOrchestrator:
    """
    Runs the canonical stage order for one answer set.

    Args:
        answers: The immutable answer set
        settings: Runtime settings (defaults to ``get_settings()``)
        target_dir: Parent directory of the project (defaults to cwd)
        services: Pre-built services, e.g. with a fake process runner
        conflict_action: Fixed action for an existing directory; prompts when None
        cleanup: Fixed rollback decision; prompts when None
        validate: Check host prerequisites (node, git, package manager) first
    """

    def __init__(
        self,
        answers: ProjectAnswers,
        settings: Settings | None = None,
        *,
        target_dir: Path | str | None = None,
        services: Services | None = None,
        console: Console | None = None,
        spinner: Spinner | None = None,
        conflict_action: ConflictAction | None = None,
        choose_conflict_action: ConflictChooser | None = None,
        cleanup: bool | None = None,
        confirm_cleanup: CleanupConfirmer | None = None,
        validate: bool = True,
    ):
        self.answers = answers
        self.settings = settings or get_settings()
        self.console = console or Console()
        self.spinner = spinner or Spinner(console=self.console)
        self.services = services or Services.create(self.settings)
        self.conflict_action = conflict_action
        self.choose_conflict_action = choose_conflict_action or (
            lambda name: prompt_conflict_action(name, self.console)
        )
        self.cleanup = cleanup
        self.confirm_cleanup = confirm_cleanup or (lambda: prompt_cleanup(self.console))
        self.validate = validate

        project_path = Path(target_dir or Path.cwd()) / answers.project_name
        self.ctx = ExecutionContext.create(project_path, answers, self.settings)
        self.outcome: PipelineOutcome | None = None
        self._project_touched = False

    @property
    def project_path(self) -> Path:
        return self.ctx.project_path

    async def validate_environment(self) -> None:
        """
        Raises:
            ValidationError: Before anything is written to disk
        """
        result = validate_project_name(self.answers.project_name)
        if not result:
            raise ValidationError(result.message)
        if self.validate:
            await validate_basic_requirements()
            await validate_package_manager(self.answers.package_manager)

    async def _resolve_conflict(self) -> None:
        if await validate_directory_availability(self.project_path):
            return
        action = self.conflict_action or self.choose_conflict_action(self.answers.project_name)
        await resolve_directory_conflict(self.project_path, action, self.services.fs)

    async def _initialize_project(self) -> None:
        self._project_touched = True
        await initialize_project(self.ctx, self.services)

    async def _run_features(self) -> None:
        await run_features(self.ctx, self.services, progress=self.spinner.update)

    def build_stages(self) -> list[Stage]:
        ctx, services = self.ctx, self.services
        return [
            Stage("Directory check", "📁 Checking target directory...", self._resolve_conflict, verbose=True),
            Stage("Project initialization", "📁 Creating project directory...", self._initialize_project),
            Stage(
                "Git initialization",
                "🔧 Initializing git repository...",
                lambda: initialize_git_repository(ctx, services),
            ),
            Stage(
                "Monorepo setup",
                "🏗️  Setting up monorepo structure...",
                lambda: MonorepoSetup(services).setup(ctx),
            ),
            Stage(
                "UI library setup",
                "🎨 Setting up shared UI library...",
                lambda: UILibrarySetup(services).setup(ctx),
                condition=lambda a: a.use_shadcn,
                verbose=True,
            ),
            Stage(
                "Frontend setup",
                "⚛️  Setting up frontend...",
                lambda: FrontendSetup(services).setup(ctx),
                condition=lambda a: a.frontend is not Frontend.NONE,
                verbose=True,
            ),
            Stage(
                "Backend setup",
                "🔌 Setting up backend...",
                lambda: BackendSetup(services).setup(ctx),
                condition=lambda a: a.backend_api is not BackendAPI.NONE,
                verbose=True,
            ),
            Stage(
                "Linting setup",
                "🎨 Setting up code quality tools...",
                lambda: LintingSetup(services).setup(ctx),
                condition=lambda a: a.linter is not Linter.NONE,
            ),
            Stage(
                "Feature setup",
                "✨ Setting up features...",
                self._run_features,
                condition=lambda a: bool(selected_features(a)),
            ),
            Stage(
                "Configuration files",
                "📝 Creating configuration files...",
                lambda: create_configuration_files(ctx, services),
            ),
            Stage(
                "Dependency installation",
                "📦 Installing dependencies...",
                lambda: install_dependencies(ctx, services),
            ),
            Stage(
                "Initial commit",
                "📝 Creating initial commit...",
                lambda: create_initial_commit(ctx, services),
                policy=StagePolicy.OPTIONAL,
            ),
        ]

    async def execute(self) -> PipelineOutcome:
        """
        Validate, then run every stage.

        Raises:
            SetupCancelled: The operator chose to cancel on a conflict
            ScaffoldError: Validation or the first failed required stage
        """
        await self.validate_environment()
        self.spinner.start("Starting setup...")
        try:
            self.outcome = await run_stages(self.build_stages(), self.answers, self.spinner)
        finally:
            self.spinner.stop()
        return self.outcome

    async def run(self) -> int:
        """Run the setup and return the process exit code."""
        with Timer("setup") as timer:
            try:
                outcome = await self.execute()
            except SetupCancelled as e:
                logger.info("Setup cancelled: %s", e)
                return 0
            except Exception as e:
                await self.handle_failure(e)
                return 1

        logger.info("Project %s created", self.answers.project_name, extra={"duration_ms": timer.duration_ms})
        show_success(self.console, self.answers, self.answers.project_name, outcome.warnings)
        return 0

    async def handle_failure(self, error: BaseException) -> None:
        """Report the error and roll back the project directory if confirmed."""
        self.spinner.fail("Setup failed")
        log_exception(logger, "Setup failed", error)
        show_error(self.console, describe_error(error))

        if not self._project_touched:
            return
        should_clean = self.cleanup if self.cleanup is not None else self.confirm_cleanup()
        if should_clean:
            await cleanup_project(self.project_path, self.services.fs)
            self.console.print("[green]Cleaned up partially created project.[/green]")
        else:
            self.console.print(f"[yellow]Partial project left at {self.project_path}[/yellow]")


__all__ = ["SetupOrchestrator"]
