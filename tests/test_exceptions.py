"""
Tests for core/exceptions.py
============================

Tests for the exception hierarchy, error codes and helpers.
"""

import pytest

from create_march_app.core.exceptions import (
    CommandFailedError,
    CommandTimeoutError,
    ErrorCategory,
    FeatureError,
    FileSystemError,
    MissingToolError,
    PackageManagerError,
    ProcessError,
    ScaffoldError,
    SetupCancelled,
    StageError,
    ValidationError,
    describe_error,
    get_error_code,
    is_timeout,
)
from create_march_app.core.models import SetupResult


class TestHierarchy:
    """Tests for class relationships."""

    @pytest.mark.parametrize(
        "error_type",
        [ValidationError, FileSystemError, ProcessError, PackageManagerError, StageError, SetupCancelled],
    )
    def test_rooted_at_scaffold_error(self, error_type):
        """Test that every error derives from ScaffoldError."""
        assert issubclass(error_type, ScaffoldError)

    def test_specialisations(self):
        """Test the nested relationships."""
        assert issubclass(FeatureError, StageError)
        assert issubclass(MissingToolError, ValidationError)
        assert issubclass(CommandTimeoutError, ProcessError)
        assert issubclass(CommandFailedError, ProcessError)


class TestPayloads:
    """Tests for typed payloads and messages."""

    def test_stage_error_message(self):
        """Test that the stage name prefixes the original message."""
        error = StageError("Frontend setup", "create-next-app exited with status 1")
        assert str(error) == "Frontend setup failed: create-next-app exited with status 1"
        assert error.stage == "Frontend setup"
        assert error.category is ErrorCategory.STAGE

    def test_filesystem_error_path(self, tmp_path):
        """Test that the failing path is kept."""
        error = FileSystemError("Failed to write file", tmp_path / "x", OSError("read-only"))
        assert error.path == tmp_path / "x"
        assert "read-only" in str(error)

    def test_command_failed_summary(self):
        """Test that the last output line is summarised."""
        error = CommandFailedError(["npm", "install"], 1, stderr="line one\nERESOLVE could not resolve\n")
        assert "exited with status 1: ERESOLVE could not resolve" in str(error)
        assert error.returncode == 1

    def test_command_timeout(self):
        """Test the timeout message."""
        error = CommandTimeoutError(["bun", "add", "zod"], 300)
        assert str(error) == "Command 'bun add zod' timed out after 300s"

    def test_to_dict(self):
        """Test structured conversion."""
        error = PackageManagerError("Failed", "pnpm", ["zod"], RuntimeError("x"))
        data = error.to_dict()
        assert data["error_code"] == "PACKAGE_MANAGER_ERROR"
        assert data["context"]["package_manager"] == "pnpm"
        assert data["context"]["packages"] == ["zod"]
        assert data["cause"] == "x"


class TestHelpers:
    """Tests for helper functions."""

    def test_is_timeout_through_causes(self):
        """Test timeout detection through wrapping errors."""
        timeout = CommandTimeoutError(["bun", "add", "zod"], 300)
        wrapped = StageError("Install", "failed", PackageManagerError("Failed", "bun", ["zod"], timeout))
        assert is_timeout(wrapped)
        assert not is_timeout(StageError("Install", "failed", RuntimeError("x")))

    def test_get_error_code(self):
        """Test codes for package and foreign errors."""
        assert get_error_code(SetupCancelled("x")) == "SETUP_CANCELLED"
        assert get_error_code(KeyError("x")) == "KEYERROR"

    def test_describe_error_empty_message(self):
        """Test that an empty message falls back to the type name."""
        assert describe_error(RuntimeError()) == "RuntimeError"


class TestSetupResult:
    """Tests for the SetupResult contract."""

    def test_failed_requires_message(self):
        """Test that a failed result cannot have an empty message."""
        with pytest.raises(ValueError):
            SetupResult(False, "  ")

    def test_ok_with_warnings(self):
        """Test that warnings are stored as a tuple."""
        result = SetupResult.ok("done", ["careful"])
        assert result.success
        assert result.warnings == ("careful",)
