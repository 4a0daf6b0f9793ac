"""
Package Manager Strategies
==========================

One install surface over npm, yarn, pnpm and bun.

Each strategy translates ``install`` / ``install_dev`` into its tool's
subcommand and dev flag and runs it as a captured, non-interactive child
process. bun gets a protective policy: longer timeouts, more so for known
slow packages, and a single npm re-run when (and only when) bun times out.

Usage:
    service = PackageManagerService()
    await service.install_packages(["zod"], PackageManager.PNPM, cwd=app_path)
    await service.install_packages(["vitest"], PackageManager.BUN, cwd=app_path, dev=True)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Sequence

from ..answers import PackageManager
from .exceptions import PackageManagerError, ProcessError, is_timeout
from .logging import log_package, log_success
from .process import CommandResult, Runner, run_command

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_TIMEOUT = 180.0

# bun policy, in seconds
BUN_MIN_TIMEOUT = 300.0
BUN_SLOW_PACKAGE_TIMEOUT = 600.0

# Substrings of package names that make bun slow: ORM codegen, browser
# automation, bundlers, the type system and framework meta-packages
SLOW_PACKAGE_MARKERS = (
    "prisma",
    "@prisma",
    "playwright",
    "@playwright",
    "nextjs",
    "webpack",
    "vite",
    "typescript",
    "@types",
)


@dataclass(frozen=True)
class InstallOptions:
    """Per-call options; ``cwd=None`` means the current directory."""

    cwd: Path | str | None = None
    timeout: float = DEFAULT_INSTALL_TIMEOUT

    def resolved_cwd(self) -> Path:
        return Path(self.cwd) if self.cwd is not None else Path.cwd()


def has_slow_packages(args: Sequence[str]) -> bool:
    return any(marker in arg for arg in args for marker in SLOW_PACKAGE_MARKERS)


class PackageManagerStrategy:
    """Base strategy; subclasses set the tool's tokens."""

    name: ClassVar[PackageManager]
    install_verb: ClassVar[str] = "add"
    dev_flag: ClassVar[str] = "-D"
    execute_command: ClassVar[tuple[str, ...]] = ()

    def __init__(self, runner: Runner = run_command):
        self.runner = runner

    @property
    def binary(self) -> str:
        return self.name.value

    def install_args(self, packages: Sequence[str], dev: bool = False) -> list[str]:
        args = [self.install_verb]
        if dev:
            args.append(self.dev_flag)
        args.extend(packages)
        return args

    def effective_timeout(self, args: Sequence[str], timeout: float) -> float:
        return timeout

    async def install(self, packages: Sequence[str], options: InstallOptions | None = None) -> None:
        await self.execute(self.install_args(packages), options or InstallOptions())

    async def install_dev(self, packages: Sequence[str], options: InstallOptions | None = None) -> None:
        await self.execute(self.install_args(packages, dev=True), options or InstallOptions())

    async def install_all(self, options: InstallOptions | None = None) -> None:
        """Install everything declared in the manifest at ``options.cwd``."""
        await self.execute(["install"], options or InstallOptions())

    async def execute(self, args: Sequence[str], options: InstallOptions) -> CommandResult:
        return await self.runner(
            [self.binary, *args],
            cwd=options.resolved_cwd(),
            timeout=self.effective_timeout(args, options.timeout),
        )


class NpmStrategy(PackageManagerStrategy):
    name = PackageManager.NPM
    install_verb = "install"
    dev_flag = "-D"
    execute_command = ("npx",)


class YarnStrategy(PackageManagerStrategy):
    name = PackageManager.YARN
    install_verb = "add"
    dev_flag = "-D"
    execute_command = ("yarn", "dlx")


class PnpmStrategy(PackageManagerStrategy):
    name = PackageManager.PNPM
    install_verb = "add"
    dev_flag = "-D"
    execute_command = ("pnpm", "dlx")


class BunStrategy(PackageManagerStrategy):
    """
    bun is fast but unreliable on large installs.

    Timeouts are raised to at least 5 minutes (10 with slow packages) and a
    timed-out install is re-issued once with npm. Other failures propagate
    untouched: switching tools changes the lockfile format and must not hide
    real errors such as a misspelled package.
    """

    name = PackageManager.BUN
    install_verb = "add"
    dev_flag = "-d"
    execute_command = ("bunx",)

    fallback: ClassVar[type[PackageManagerStrategy]] = NpmStrategy

    def effective_timeout(self, args: Sequence[str], timeout: float) -> float:
        effective = max(timeout, BUN_MIN_TIMEOUT)
        if has_slow_packages(args):
            effective = max(effective, BUN_SLOW_PACKAGE_TIMEOUT)
        return effective

    def fallback_args(self, args: Sequence[str]) -> list[str]:
        """Translate bun tokens into the fallback tool's dialect."""
        token_map = {
            self.install_verb: self.fallback.install_verb,
            self.dev_flag: self.fallback.dev_flag,
        }
        return [token_map.get(arg, arg) for arg in args]

    async def execute(self, args: Sequence[str], options: InstallOptions) -> CommandResult:
        timeout = self.effective_timeout(args, options.timeout)
        try:
            return await self.runner([self.binary, *args], cwd=options.resolved_cwd(), timeout=timeout)
        except ProcessError as e:
            if not is_timeout(e):
                raise
            fallback = self.fallback(self.runner)
            logger.warning(
                "bun timed out installing packages [%s], falling back to %s...",
                ", ".join(args[1:]),
                fallback.binary,
            )
            return await self.runner(
                [fallback.binary, *self.fallback_args(args)],
                cwd=options.resolved_cwd(),
                timeout=timeout,
            )


STRATEGY_TYPES: dict[PackageManager, type[PackageManagerStrategy]] = {
    PackageManager.NPM: NpmStrategy,
    PackageManager.YARN: YarnStrategy,
    PackageManager.PNPM: PnpmStrategy,
    PackageManager.BUN: BunStrategy,
}


class PackageManagerService:
    """Holds one strategy per tool for the lifetime of a run."""

    def __init__(self, runner: Runner = run_command, default_timeout: float = DEFAULT_INSTALL_TIMEOUT):
        self.default_timeout = default_timeout
        self._strategies = {name: strategy_type(runner) for name, strategy_type in STRATEGY_TYPES.items()}

    def get_strategy(self, package_manager: PackageManager) -> PackageManagerStrategy:
        return self._strategies[PackageManager(package_manager)]

    def get_execute_command(self, package_manager: PackageManager) -> list[str]:
        return list(self.get_strategy(package_manager).execute_command)

    async def install_packages(
        self,
        packages: Sequence[str],
        package_manager: PackageManager,
        *,
        cwd: Path | str | None = None,
        dev: bool = False,
        timeout: float | None = None,
    ) -> None:
        """
        Install packages with the chosen tool.

        Raises:
            ValueError: If ``packages`` is empty
            PackageManagerError: On any failure, including an exhausted fallback
        """
        packages = list(packages)
        if not packages:
            raise ValueError("install_packages requires at least one package")

        package_manager = PackageManager(package_manager)
        strategy = self.get_strategy(package_manager)
        options = InstallOptions(cwd=cwd, timeout=timeout or self.default_timeout)

        log_package(logger, "Installing packages: %s with %s", ", ".join(packages), package_manager.value)
        try:
            if dev:
                await strategy.install_dev(packages, options)
            else:
                await strategy.install(packages, options)
        except Exception as e:
            raise PackageManagerError(
                f"Failed to install packages {', '.join(packages)} with {package_manager.value}",
                package_manager.value,
                packages,
                e,
            ) from e
        log_success(logger, "Packages installed successfully: %s", ", ".join(packages))

    async def install_dependencies(
        self,
        package_manager: PackageManager,
        *,
        cwd: Path | str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Run the tool's plain ``install`` against an existing manifest."""
        package_manager = PackageManager(package_manager)
        options = InstallOptions(cwd=cwd, timeout=timeout or self.default_timeout)
        try:
            await self.get_strategy(package_manager).install_all(options)
        except Exception as e:
            raise PackageManagerError(
                f"Failed to install dependencies with {package_manager.value}",
                package_manager.value,
                [],
                e,
            ) from e
