"""Unit testing tools."""

from __future__ import annotations

import logging
from typing import assert_never

from ..answers import ProjectAnswers, TestingTool
from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services

logger = logging.getLogger(__name__)

JEST_CONFIG = """\
/** @type {{import('jest').Config}} */
const config = {{
  preset: "ts-jest",
  testEnvironment: "{environment}",
  moduleNameMapper: {{ "^@/(.*)$": "<rootDir>/src/$1" }},
  testPathIgnorePatterns: ["/node_modules/", "/.next/", "/dist/"],
}};

module.exports = config;
"""

EXAMPLE_TEST = """\
describe("example", () => {
  it("adds numbers", () => {
    expect(1 + 1).toBe(2);
  });
});
"""


def jest_packages(answers: ProjectAnswers) -> list[str]:
    packages = ["jest", "@types/jest", "ts-jest"]
    if answers.is_react:
        packages += ["jest-environment-jsdom", "@testing-library/react", "@testing-library/jest-dom"]
    return packages


async def setup_jest(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Configuring Jest...")
    app = ctx.app_path
    environment = "jsdom" if ctx.answers.is_react else "node"
    await services.install(ctx, jest_packages(ctx.answers), app, dev=True)
    await services.fs.write_file(app / "jest.config.cjs", JEST_CONFIG.format(environment=environment))
    await services.fs.write_file(app / "src" / "__tests__" / "example.test.ts", EXAMPLE_TEST)


async def setup_testing(ctx: ExecutionContext, services: Services) -> None:
    scripts: dict[str, str] = {}
    for tool in ctx.answers.testing_tools:
        match tool:
            case TestingTool.JEST:
                await setup_jest(ctx, services)
                scripts.update({"test": "jest", "test:watch": "jest --watch", "test:coverage": "jest --coverage"})
            case _:
                assert_never(tool)

    package_path = ctx.app_path / "package.json"
    if scripts and await services.fs.file_exists(package_path):
        await services.fs.update_json_file(package_path, {"scripts": scripts})
    log_success(logger, "Testing tools setup completed")
