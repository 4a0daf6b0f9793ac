"""Workspace layout for the chosen monorepo tool."""

from __future__ import annotations

import logging
from typing import Any, assert_never

from .answers import MonorepoTool
from .core.exceptions import ScaffoldError
from .core.logging import log_step, log_success
from .core.models import ExecutionContext, Services, SetupResult
from .nx import NxCliService, generator_spec, get_required_plugins
from .project import write_gitignore

logger = logging.getLogger(__name__)

TURBO_CONFIG: dict[str, Any] = {
    "$schema": "https://turbo.build/schema.json",
    "globalDependencies": [".env"],
    "tasks": {
        "build": {"dependsOn": ["^build"], "outputs": [".next/**", "!.next/cache/**", "dist/**"]},
        "lint": {"dependsOn": ["^lint"]},
        "dev": {"cache": False, "persistent": True},
        "test": {"dependsOn": ["^build"]},
        "type-check": {"dependsOn": ["^type-check"]},
    },
}

NX_IGNORE = """\
node_modules
dist
.next
.env
.env.local
coverage
"""


def _library_package_json(name: str) -> dict[str, Any]:
    return {
        "name": f"@workspace/{name}",
        "version": "0.1.0",
        "main": "./src/index.ts",
        "types": "./src/index.ts",
        "exports": {".": "./src/index.ts"},
    }


class MonorepoSetup:
    def __init__(self, services: Services):
        self.services = services
        self.nx = NxCliService(services)

    async def setup(self, ctx: ExecutionContext) -> SetupResult:
        tool = ctx.answers.monorepo_tool
        match tool:
            case MonorepoTool.TURBO:
                return await self.setup_turbo(ctx)
            case MonorepoTool.NX:
                return await self.setup_nx(ctx)
            case MonorepoTool.NONE:
                return await self.setup_plain(ctx)
            case _:
                assert_never(tool)

    async def _ensure_layout(self, ctx: ExecutionContext, *dirs: str) -> None:
        for name in dirs:
            await self.services.fs.ensure_directory(ctx.project_path / name)
        await write_gitignore(ctx.project_path, self.services.fs)

    async def setup_turbo(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up Turborepo...")
        fs = self.services.fs
        await self._ensure_layout(ctx, "apps", "packages")
        await fs.write_json(
            ctx.project_path / "package.json",
            {
                "name": ctx.project_name,
                "version": "0.0.1",
                "private": True,
                "workspaces": ["apps/*", "packages/*"],
                "scripts": {
                    "build": "turbo run build",
                    "dev": "turbo run dev",
                    "lint": "turbo run lint",
                    "test": "turbo run test",
                    "type-check": "turbo run type-check",
                },
            },
        )
        await fs.write_json(ctx.project_path / "turbo.json", TURBO_CONFIG)
        log_success(logger, "Turborepo initialized")
        return SetupResult.ok("Turborepo initialized")

    async def setup_nx(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up Nx...")
        warnings: list[str] = []

        await self.nx.initialize_workspace(ctx)
        for plugin in get_required_plugins(ctx.answers):
            warning = await self.nx.install_plugin(ctx, plugin)
            if warning:
                warnings.append(warning)

        await self._ensure_layout(ctx, "apps", "libs")
        warning = await self.setup_nx_libraries(ctx)
        if warning:
            warnings.append(warning)
        await self.services.fs.write_file(ctx.project_path / ".nxignore", NX_IGNORE)

        log_success(logger, "Nx workspace initialized")
        return SetupResult.ok("Nx workspace initialized", warnings)

    async def setup_nx_libraries(self, ctx: ExecutionContext) -> str | None:
        """
        Generate shared libraries with Nx generators.

        If a generator fails the libraries are scaffolded by hand and a
        warning is returned instead.
        """
        log_step(logger, "Setting up Nx workspace libraries...")
        libraries = [("utils", "@nx/js:library")]
        if ctx.answers.use_shadcn:
            libraries.insert(0, ("ui", "@nx/react:library"))

        try:
            for name, generator in libraries:
                spec = generator_spec(
                    generator,
                    name,
                    {"directory": f"libs/{name}", "bundler": "vite", "unitTestRunner": "jest", "skipFormat": True},
                )
                await self.nx.run_generator(ctx, spec)
        except ScaffoldError as e:
            logger.warning("Failed to generate some Nx libraries, continuing with manual setup...")
            await self._scaffold_libraries(ctx, [name for name, _ in libraries])
            return f"Nx library generators failed, libraries were scaffolded manually: {e}"

        log_success(logger, "Nx workspace libraries setup completed")
        return None

    async def _scaffold_libraries(self, ctx: ExecutionContext, names: list[str]) -> None:
        fs = self.services.fs
        for name in names:
            lib_dir = ctx.project_path / "libs" / name
            await fs.write_json(lib_dir / "package.json", _library_package_json(name))
            await fs.write_file(lib_dir / "src" / "index.ts", f"// Shared {name}\nexport {{}};\n")
        log_success(logger, "Nx workspace libraries setup completed manually")

    async def setup_plain(self, ctx: ExecutionContext) -> SetupResult:
        """Plain ``apps/`` + ``packages/`` layout without workspace tooling."""
        log_step(logger, "Setting up project layout...")
        await self._ensure_layout(ctx, "apps", "packages")
        log_success(logger, "Project layout created")
        return SetupResult.ok("Project layout created")
