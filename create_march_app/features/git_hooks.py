"""Git hooks: Husky and Commitlint."""

from __future__ import annotations

import logging

from ..answers import DeveloperExperienceTool, PackageManager
from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services
from ..project import update_root_package_json

logger = logging.getLogger(__name__)

COMMITLINT_CONFIG = """\
export default {
  extends: ["@commitlint/config-conventional"],
  rules: {
    "type-enum": [
      2,
      "always",
      ["build", "chore", "ci", "docs", "feat", "fix", "perf", "refactor", "revert", "style", "test"],
    ],
    "subject-case": [2, "never", ["sentence-case", "start-case", "pascal-case", "upper-case"]],
  },
};
"""


def _exec_prefix(package_manager: PackageManager) -> str:
    return {
        PackageManager.NPM: "npx --no --",
        PackageManager.YARN: "yarn",
        PackageManager.PNPM: "pnpm exec",
        PackageManager.BUN: "bunx",
    }[package_manager]


async def setup_husky(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up Husky...")
    pm = ctx.answers.package_manager
    fs = services.fs

    await update_root_package_json(ctx, fs, {"scripts": {"prepare": "husky"}})
    await services.install(ctx, ["husky", "lint-staged"], ctx.project_path, dev=True)
    await fs.write_file(ctx.project_path / ".husky" / "pre-commit", f"{_exec_prefix(pm)} lint-staged\n")
    if DeveloperExperienceTool.COMMITLINT in ctx.answers.developer_experience:
        await fs.write_file(
            ctx.project_path / ".husky" / "commit-msg",
            f'{_exec_prefix(pm)} commitlint --edit "$1"\n',
        )
    log_success(logger, "Husky setup completed")


async def setup_commitlint(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up Commitlint...")
    await services.install(
        ctx,
        ["@commitlint/cli", "@commitlint/config-conventional"],
        ctx.project_path,
        dev=True,
    )
    await services.fs.write_file(ctx.project_path / "commitlint.config.mjs", COMMITLINT_CONFIG)
    log_success(logger, "Commitlint setup completed")
