"""Root lint and format tooling: Biome or ESLint + Prettier."""

from __future__ import annotations

import logging
from typing import Any, assert_never

from .answers import Linter, ProjectAnswers
from .core.logging import log_step, log_success
from .core.models import ExecutionContext, Services, SetupResult
from .project import update_root_package_json

logger = logging.getLogger(__name__)

BIOME_SCRIPTS = {
    "lint": "biome check .",
    "lint:fix": "biome check . --write",
    "format": "biome format . --write",
    "format:check": "biome format .",
    "ci:check": "biome ci .",
}

ESLINT_SCRIPTS = {
    "lint": "eslint .",
    "lint:fix": "eslint . --fix",
    "format": "prettier --write .",
    "format:check": "prettier --check .",
}

LINT_STAGED = {
    "*.{js,jsx,ts,tsx}": ["eslint --fix", "prettier --write"],
    "*.{json,css,md}": ["prettier --write"],
}

PRETTIER_CONFIG = {
    "semi": True,
    "trailingComma": "es5",
    "singleQuote": True,
    "printWidth": 100,
    "tabWidth": 2,
    "useTabs": False,
    "endOfLine": "lf",
}

PRETTIER_IGNORE = """\
node_modules/
dist/
build/
.next/
out/
coverage/
package-lock.json
yarn.lock
pnpm-lock.yaml
bun.lockb
"""

IGNORED_PATHS = ["node_modules", "dist", "build", ".next", "out", "coverage"]


def biome_config() -> dict[str, Any]:
    return {
        "$schema": "https://biomejs.dev/schemas/1.9.4/schema.json",
        "vcs": {"enabled": True, "clientKind": "git", "useIgnoreFile": True},
        "files": {"ignoreUnknown": False, "ignore": IGNORED_PATHS},
        "formatter": {"enabled": True, "indentStyle": "tab"},
        "organizeImports": {"enabled": True},
        "linter": {"enabled": True, "rules": {"recommended": True}},
        "javascript": {"formatter": {"quoteStyle": "double"}},
    }


def eslint_packages(answers: ProjectAnswers) -> list[str]:
    packages = [
        "eslint",
        "prettier",
        "typescript-eslint",
        "eslint-config-prettier",
        "lint-staged",
    ]
    if answers.is_nextjs:
        packages.append("@next/eslint-plugin-next")
    if answers.is_react:
        packages += ["eslint-plugin-react", "eslint-plugin-react-hooks", "eslint-plugin-jsx-a11y"]
    return packages


def eslint_config(answers: ProjectAnswers) -> str:
    """Flat ``eslint.config.mjs`` for the selected frameworks."""
    imports = [
        'import tseslint from "typescript-eslint";',
        'import prettier from "eslint-config-prettier";',
    ]
    configs = ["...tseslint.configs.recommended"]
    if answers.is_react:
        imports += [
            'import react from "eslint-plugin-react";',
            'import reactHooks from "eslint-plugin-react-hooks";',
            'import jsxA11y from "eslint-plugin-jsx-a11y";',
        ]
        configs += [
            'react.configs.flat.recommended',
            'react.configs.flat["jsx-runtime"]',
            'reactHooks.configs["recommended-latest"]',
            "jsxA11y.flatConfigs.recommended",
        ]
    if answers.is_nextjs:
        imports.append('import next from "@next/eslint-plugin-next";')
        configs.append('next.configs["core-web-vitals"]')
    configs.append("prettier")

    ignores = ", ".join(f'"{path}/"' for path in IGNORED_PATHS)
    body = ",\n  ".join([f"{{ ignores: [{ignores}] }}", *configs])
    return "\n".join(imports) + f"\n\nexport default tseslint.config(\n  {body},\n);\n"


class LintingSetup:
    def __init__(self, services: Services):
        self.services = services

    async def setup(self, ctx: ExecutionContext) -> SetupResult:
        linter = ctx.answers.linter
        match linter:
            case Linter.BIOME:
                return await self.setup_biome(ctx)
            case Linter.ESLINT_PRETTIER:
                return await self.setup_eslint_prettier(ctx)
            case Linter.NONE:
                return SetupResult.ok("Lint setup skipped")
            case _:
                assert_never(linter)

    async def setup_biome(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up Biome...")
        fs = self.services.fs
        await fs.write_json(ctx.project_path / "biome.json", biome_config())
        await update_root_package_json(ctx, fs, {"scripts": BIOME_SCRIPTS})
        await self.services.install(ctx, ["@biomejs/biome"], ctx.project_path, dev=True)
        log_success(logger, "Biome setup completed")
        return SetupResult.ok("Biome setup completed")

    async def setup_eslint_prettier(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up ESLint + Prettier...")
        fs = self.services.fs
        await fs.write_file(ctx.project_path / "eslint.config.mjs", eslint_config(ctx.answers))
        await fs.write_json(ctx.project_path / ".prettierrc", PRETTIER_CONFIG)
        await fs.write_file(ctx.project_path / ".prettierignore", PRETTIER_IGNORE)
        await update_root_package_json(ctx, fs, {"scripts": ESLINT_SCRIPTS, "lint-staged": LINT_STAGED})
        await self.services.install(ctx, eslint_packages(ctx.answers), ctx.project_path, dev=True)
        log_success(logger, "ESLint + Prettier setup completed")
        return SetupResult.ok("ESLint + Prettier setup completed")
