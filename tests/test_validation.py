"""Tests for validation.py."""

from unittest.mock import AsyncMock, patch

import pytest

from create_march_app.answers import PackageManager
from create_march_app.core.exceptions import CommandNotFoundError, MissingToolError
from create_march_app.core.process import CommandResult
from create_march_app.validation import (
    validate_basic_requirements,
    validate_directory_availability,
    validate_package_manager,
    validate_project_name,
)


class TestValidateProjectName:
    """Tests for npm naming rules."""

    @pytest.mark.parametrize("name", ["my-app", "app2", "a", "march-saas-2024"])
    def test_valid(self, name):
        """Test names that npm accepts."""
        result = validate_project_name(name)
        assert result
        assert result.is_valid

    @pytest.mark.parametrize(
        "name,fragment",
        [
            ("", "required"),
            (None, "required"),
            ("a" * 215, "less than 214"),
            (".hidden", "cannot start with"),
            ("_private", "cannot start with"),
            ("My-App", "lowercase"),
            ("my app", "lowercase"),
            ("my--app", "consecutive dashes"),
            ("-app", "start/end"),
            ("app-", "start/end"),
            ("node_modules", "lowercase"),
        ],
    )
    def test_invalid(self, name, fragment):
        """Test rejected names and their messages."""
        result = validate_project_name(name)
        assert not result
        assert fragment in result.message

    def test_reserved(self):
        """Test that reserved names matching the pattern are rejected."""
        with patch("create_march_app.validation.RESERVED_NAMES", frozenset({"reserved-name"})):
            result = validate_project_name("reserved-name")
        assert not result
        assert "reserved" in result.message


class TestToolChecks:
    """Tests for host prerequisite checks."""

    @pytest.mark.asyncio
    async def test_basic_requirements_pass(self):
        """Test that node and git are each checked."""
        runner = AsyncMock(return_value=CommandResult(("x",), 0, "v20.0.0"))
        with patch("create_march_app.validation.run_command", runner):
            await validate_basic_requirements()

        checked = [call.args[0][0] for call in runner.await_args_list]
        assert checked == ["node", "git"]

    @pytest.mark.asyncio
    async def test_missing_tool(self):
        """Test that a missing binary becomes MissingToolError naming it."""

        async def runner(command, **kwargs):
            if command[0] == "git":
                raise CommandNotFoundError("Command not found: git", command)
            return CommandResult(tuple(command), 0)

        with patch("create_march_app.validation.run_command", runner):
            with pytest.raises(MissingToolError) as exc_info:
                await validate_basic_requirements()

        assert exc_info.value.tool == "git"

    @pytest.mark.asyncio
    async def test_package_manager_missing(self):
        """Test the package manager message."""
        runner = AsyncMock(side_effect=CommandNotFoundError("Command not found: pnpm", ["pnpm"]))
        with patch("create_march_app.validation.run_command", runner):
            with pytest.raises(MissingToolError, match="Selected package manager 'pnpm'"):
                await validate_package_manager(PackageManager.PNPM)

    @pytest.mark.asyncio
    async def test_unknown_package_manager(self):
        """Test that an unknown manager name is a ValueError."""
        with pytest.raises(ValueError):
            await validate_package_manager("pip")


class TestDirectoryAvailability:
    """Tests for validate_directory_availability."""

    @pytest.mark.asyncio
    async def test_available(self, tmp_path):
        assert await validate_directory_availability(tmp_path / "new")

    @pytest.mark.asyncio
    async def test_taken(self, tmp_path):
        (tmp_path / "taken").mkdir()
        assert not await validate_directory_availability(tmp_path / "taken")
