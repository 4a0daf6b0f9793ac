"""GitHub Actions workflows."""

from __future__ import annotations

import logging
from typing import Any

import yaml

from ..answers import PackageManager, ProjectAnswers, TestingTool
from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services

logger = logging.getLogger(__name__)

NODE_VERSION = "20"


def _setup_steps(package_manager: PackageManager) -> list[dict[str, Any]]:
    steps: list[dict[str, Any]] = [{"uses": "actions/checkout@v4"}]
    match package_manager:
        case PackageManager.BUN:
            steps.append({"uses": "oven-sh/setup-bun@v2"})
        case PackageManager.PNPM:
            steps.append({"uses": "pnpm/action-setup@v4"})
            steps.append(
                {"uses": "actions/setup-node@v4", "with": {"node-version": NODE_VERSION, "cache": "pnpm"}}
            )
        case PackageManager.NPM | PackageManager.YARN:
            steps.append(
                {
                    "uses": "actions/setup-node@v4",
                    "with": {"node-version": NODE_VERSION, "cache": package_manager.value},
                }
            )
    return steps


def ci_workflow(answers: ProjectAnswers) -> dict[str, Any]:
    pm = answers.package_manager.value
    steps = _setup_steps(answers.package_manager)
    steps += [
        {"name": "Install dependencies", "run": f"{pm} install"},
        {"name": "Run linter", "run": f"{pm} run lint"},
        {"name": "Run type check", "run": f"{pm} run type-check"},
    ]
    if TestingTool.JEST in answers.testing_tools:
        steps.append({"name": "Run unit tests", "run": f"{pm} run test --workspaces --if-present"})
    steps.append({"name": "Build", "run": f"{pm} run build"})

    return {
        "name": "CI",
        "on": {"push": {"branches": ["main"]}, "pull_request": {"branches": ["main"]}},
        "jobs": {"test": {"runs-on": "ubuntu-latest", "steps": steps}},
    }


async def setup_github_actions(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up GitHub Actions...")
    workflow = yaml.safe_dump(ci_workflow(ctx.answers), sort_keys=False)
    await services.fs.write_file(ctx.project_path / ".github" / "workflows" / "ci.yml", workflow)
    log_success(logger, "GitHub Actions workflow created")
