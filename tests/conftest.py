"""Shared fixtures: settings, a recording process runner and execution contexts."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from create_march_app.answers import ProjectAnswers
from create_march_app.config import Settings, get_settings
from create_march_app.core.models import ExecutionContext, Services
from create_march_app.core.process import CommandResult


class FakeRunner:
    """
    Stands in for ``run_command``.

    Records every call; ``handler`` may return a CommandResult, raise, or
    return None for a successful empty result.
    """

    def __init__(self, handler: Callable[[list[str]], CommandResult | None] | None = None):
        self.handler = handler
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, command, cwd=None, timeout=60, env=None, **kwargs) -> CommandResult:
        command = [str(part) for part in command]
        self.calls.append({"command": command, "cwd": cwd, "timeout": timeout, "env": env})
        if self.handler is not None:
            result = self.handler(command)
            if result is not None:
                return result
        return CommandResult(tuple(command), 0)

    @property
    def commands(self) -> list[list[str]]:
        return [call["command"] for call in self.calls]


@pytest.fixture(autouse=True)
def clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging so caplog sees package records."""
    yield
    package_logger = logging.getLogger("create_march_app")
    for handler in package_logger.handlers[:]:
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def services(settings: Settings, fake_runner: FakeRunner) -> Services:
    return Services.create(settings, fake_runner)


@pytest.fixture
def make_context(tmp_path: Path, settings: Settings) -> Callable[..., ExecutionContext]:
    """Build an ExecutionContext for ``tmp_path/<project_name>``."""

    def _make(project_name: str = "demo-app", **answers: Any) -> ExecutionContext:
        project_answers = ProjectAnswers(project_name=project_name, **answers)
        return ExecutionContext.create(tmp_path / project_name, project_answers, settings)

    return _make
