"""Shared value types passed between the orchestrator and setup services."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Mapping, Sequence

from .filesystem import FileSystemService
from .package_manager import PackageManagerService
from .process import CommandResult, Runner, quote_command, run_command

if TYPE_CHECKING:
    from ..answers import ProjectAnswers
    from ..config import Settings


@dataclass(frozen=True)
class SetupResult:
    """
    Return contract of every pluggable setup unit.

    A failed result always carries a message; warnings are informational
    and never abort the pipeline.
    """

    success: bool
    message: str
    warnings: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.success and not self.message.strip():
            raise ValueError("A failed SetupResult must carry a message")
        object.__setattr__(self, "warnings", tuple(self.warnings))

    @classmethod
    def ok(cls, message: str, warnings: list[str] | tuple[str, ...] = ()) -> "SetupResult":
        return cls(True, message, tuple(warnings))

    @classmethod
    def failed(cls, message: str) -> "SetupResult":
        return cls(False, message)


@dataclass(frozen=True)
class ExecutionContext:
    """Per-run bundle of resolved paths, answers and ambient handles."""

    project_path: Path
    app_path: Path
    backend_path: Path
    packages_path: Path
    answers: "ProjectAnswers"
    settings: "Settings"
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("create_march_app"))

    @property
    def project_name(self) -> str:
        return self.project_path.name

    @property
    def apps_path(self) -> Path:
        return self.project_path / "apps"

    @classmethod
    def create(
        cls,
        project_path: Path | str,
        answers: "ProjectAnswers",
        settings: "Settings",
        logger: logging.Logger | None = None,
    ) -> "ExecutionContext":
        project_path = Path(project_path).resolve()
        fs = FileSystemService(settings.app_dir_name, settings.backend_dir_name)
        return cls(
            project_path=project_path,
            app_path=fs.resolve_app_path(project_path),
            backend_path=fs.resolve_backend_path(project_path),
            packages_path=fs.resolve_packages_path(project_path),
            answers=answers,
            settings=settings,
            logger=logger or logging.getLogger("create_march_app"),
        )


@dataclass
class Services:
    """The collaborators every setup step receives, built once per run."""

    fs: FileSystemService
    packages: PackageManagerService
    runner: Runner = run_command

    @classmethod
    def create(cls, settings: "Settings", runner: Runner = run_command) -> "Services":
        return cls(
            fs=FileSystemService(settings.app_dir_name, settings.backend_dir_name),
            packages=PackageManagerService(runner, settings.install_timeout),
            runner=runner,
        )

    async def install(
        self,
        ctx: ExecutionContext,
        packages: Sequence[str],
        cwd: Path,
        dev: bool = False,
    ) -> None:
        """Install with the run's package manager and install timeout."""
        await self.packages.install_packages(
            packages,
            ctx.answers.package_manager,
            cwd=cwd,
            dev=dev,
            timeout=ctx.settings.install_timeout,
        )

    async def execute(
        self,
        ctx: ExecutionContext,
        args: Sequence[str],
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        """Run a package binary (``npx``, ``bunx``, ...) such as a framework generator."""
        command = [*self.packages.get_execute_command(ctx.answers.package_manager), *args]
        ctx.logger.debug("Running %s in %s", quote_command(command), cwd)
        return await self.runner(command, cwd=cwd, timeout=ctx.settings.generator_timeout, env=env)

    async def git(self, ctx: ExecutionContext, *args: str) -> CommandResult:
        ctx.logger.debug("Running git %s", " ".join(args))
        return await self.runner(["git", *args], cwd=ctx.project_path, timeout=ctx.settings.generator_timeout)
