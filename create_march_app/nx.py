"""
Nx CLI Integration
==================

Workspace initialisation, plugin installs and generator runs for Nx.

Generators are described with CommandSpec so the exact argument list can be
checked without spawning Nx.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .answers import BackendAPI, Frontend, Linter, ProjectAnswers, TestingTool
from .core.exceptions import PackageManagerError
from .core.logging import log_step, log_success
from .core.models import ExecutionContext, Services
from .core.process import CommandSpec

logger = logging.getLogger(__name__)

CORE_PACKAGES = ("nx@latest", "@nx/workspace@latest")
WORKSPACE_PACKAGES = ("typescript@latest", "@types/node@latest")

NX_ENV = {"NX_INTERACTIVE": "false"}

NX_CONFIG: dict[str, Any] = {
    "$schema": "./node_modules/nx/schemas/nx-schema.json",
    "namedInputs": {
        "default": ["{projectRoot}/**/*", "sharedGlobals"],
        "production": [
            "default",
            "!{projectRoot}/**/?(*.)+(spec|test).[jt]s?(x)?(.snap)",
            "!{projectRoot}/tsconfig.spec.json",
            "!{projectRoot}/eslint.config.js",
        ],
        "sharedGlobals": [],
    },
    "targetDefaults": {
        "build": {"cache": True, "dependsOn": ["^build"], "inputs": ["production", "^production"]},
        "test": {"cache": True, "inputs": ["default", "^production"]},
        "lint": {"cache": True, "inputs": ["default", "{workspaceRoot}/eslint.config.js"]},
        "e2e": {"cache": True, "inputs": ["default", "^production"]},
    },
    "defaultBase": "main",
}


@dataclass(frozen=True)
class NxPlugin:
    name: str
    required: bool = True
    version: str = "latest"

    @property
    def package(self) -> str:
        return f"{self.name}@{self.version}"


def generator_spec(generator: str, name: str, options: dict[str, str | bool] | None = None) -> CommandSpec:
    """Build ``nx g <generator> <name> --no-interactive ...`` tokens."""
    return CommandSpec(
        "g",
        generator,
        {"interactive": False, **(options or {})},
        positional=(name,),
    )


def get_required_plugins(answers: ProjectAnswers) -> list[NxPlugin]:
    plugins: list[NxPlugin] = []

    if answers.is_nextjs:
        plugins.append(NxPlugin("@nx/next"))
    elif answers.frontend is Frontend.VITE:
        plugins.extend([NxPlugin("@nx/react"), NxPlugin("@nx/vite")])

    if answers.backend_api is BackendAPI.NESTJS:
        plugins.append(NxPlugin("@nx/nest"))
    elif answers.backend_api in (BackendAPI.TRPC, BackendAPI.GRAPHQL_APOLLO):
        plugins.append(NxPlugin("@nx/node"))

    if TestingTool.JEST in answers.testing_tools:
        plugins.append(NxPlugin("@nx/jest", required=False))

    if answers.linter is Linter.ESLINT_PRETTIER:
        plugins.append(NxPlugin("@nx/eslint", required=False))

    return plugins


class NxCliService:
    def __init__(self, services: Services):
        self.services = services

    async def initialize_workspace(self, ctx: ExecutionContext) -> None:
        log_step(logger, "Initializing Nx workspace...")
        await self.services.install(ctx, CORE_PACKAGES, ctx.project_path, dev=True)
        await self.services.fs.write_json(ctx.project_path / "nx.json", NX_CONFIG)
        await self.services.install(ctx, WORKSPACE_PACKAGES, ctx.project_path, dev=True)
        log_success(logger, "Nx workspace initialized successfully")

    async def install_plugin(self, ctx: ExecutionContext, plugin: NxPlugin) -> str | None:
        """
        Install one plugin.

        Returns a warning message when an optional plugin fails; failures of
        required plugins propagate.
        """
        log_step(logger, "Installing Nx plugin: %s", plugin.name)
        try:
            await self.services.install(ctx, [plugin.package], ctx.project_path, dev=True)
        except PackageManagerError as e:
            if plugin.required:
                raise
            logger.warning("Failed to install optional Nx plugin %s, continuing...", plugin.name)
            return f"Optional Nx plugin {plugin.name} was not installed: {e}"
        log_success(logger, "Nx plugin %s installed successfully", plugin.name)
        return None

    async def run_generator(self, ctx: ExecutionContext, spec: CommandSpec, cwd: Path | None = None) -> None:
        log_step(logger, "Running Nx generator: %s", spec.target)
        result = await self.services.execute(ctx, ["nx", *spec.to_args()], cwd or ctx.project_path, env=NX_ENV)
        for line in result.stdout.splitlines():
            if line.strip():
                logger.debug("[%s] %s", spec.target, line.strip())
        log_success(logger, "Nx generator %s completed successfully", spec.target)
