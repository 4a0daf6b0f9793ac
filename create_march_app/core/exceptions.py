"""
Errors
======

Every failure create-march-app reports is a ScaffoldError subclass carrying
an ``error_code`` for log records, a category and severity for the final
report, and the lower-level exception that caused it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Sequence


class ErrorCategory(Enum):
    VALIDATION = "validation"
    FILESYSTEM = "filesystem"
    PROCESS = "process"
    TIMEOUT = "timeout"
    PACKAGE_MANAGER = "package_manager"
    STAGE = "stage"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class ErrorSeverity(Enum):
    LOW = "low"  # run continues
    MEDIUM = "medium"  # a fallback may still succeed
    HIGH = "high"  # run aborts
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Where an error happened: component, stage and free-form details."""

    component: str = ""
    stage: str = ""
    operation: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        details = {key: value for key, value in asdict(self).items() if key != "extra" and value}
        return {**details, **self.extra}


class ScaffoldError(Exception):
    """Root of the create-march-app error hierarchy."""

    error_code: str = "SCAFFOLD_ERROR"
    category: ErrorCategory = ErrorCategory.INTERNAL
    severity: ErrorSeverity = ErrorSeverity.HIGH

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.context = context if context is not None else ErrorContext()
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is None or str(self.cause) in self.message:
            return self.message
        return f"{self.message}: {self.cause}"

    def to_dict(self) -> dict[str, Any]:
        """Payload for structured log records."""
        return {
            "error_code": self.error_code,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "context": self.context.to_dict(),
            "cause": None if self.cause is None else str(self.cause),
        }


# Validation Errors


class ValidationError(ScaffoldError):
    """Host prerequisites or user input failed validation."""

    error_code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION


class MissingToolError(ValidationError):
    """A required host tool is not installed or not on PATH."""

    error_code = "MISSING_TOOL"

    def __init__(self, tool: str, message: str | None = None):
        super().__init__(
            message
            or f"Required tool '{tool}' is not installed or not in PATH. "
            "Please install it and try again.",
            ErrorContext(component="validation", extra={"tool": tool}),
        )
        self.tool = tool


class InvalidAnswersError(ValidationError):
    """An answers file or answer value could not be understood."""

    error_code = "INVALID_ANSWERS"


# Filesystem Errors


class FileSystemError(ScaffoldError):
    """A directory or file operation failed."""

    error_code = "FILESYSTEM_ERROR"
    category = ErrorCategory.FILESYSTEM

    def __init__(
        self,
        message: str,
        path: Path | str,
        cause: BaseException | None = None,
    ):
        super().__init__(
            message,
            ErrorContext(component="filesystem", extra={"path": str(path)}),
            cause,
        )
        self.path = Path(path)


# Process Errors


class ProcessError(ScaffoldError):
    """Base error for child process failures."""

    error_code = "PROCESS_ERROR"
    category = ErrorCategory.PROCESS

    def __init__(
        self,
        message: str,
        command: Sequence[str],
        cause: BaseException | None = None,
    ):
        super().__init__(
            message,
            ErrorContext(component="process", extra={"command": " ".join(command)}),
            cause,
        )
        self.command = list(command)


class CommandNotFoundError(ProcessError):
    """The executable could not be found."""

    error_code = "COMMAND_NOT_FOUND"


class CommandFailedError(ProcessError):
    """The command exited with a non-zero status."""

    error_code = "COMMAND_FAILED"

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ):
        detail = (stderr or stdout).strip().splitlines()
        summary = detail[-1] if detail else "no output"
        super().__init__(
            f"Command '{' '.join(command)}' exited with status {returncode}: {summary}",
            command,
        )
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


class CommandTimeoutError(ProcessError):
    """The command did not finish within its timeout."""

    error_code = "COMMAND_TIMEOUT"
    category = ErrorCategory.TIMEOUT
    severity = ErrorSeverity.MEDIUM

    def __init__(self, command: Sequence[str], timeout: float):
        super().__init__(
            f"Command '{' '.join(command)}' timed out after {timeout:g}s",
            command,
        )
        self.timeout = timeout


# Package Manager Errors


class PackageManagerError(ScaffoldError):
    """Installing packages with a package manager failed."""

    error_code = "PACKAGE_MANAGER_ERROR"
    category = ErrorCategory.PACKAGE_MANAGER

    def __init__(
        self,
        message: str,
        package_manager: str,
        packages: Sequence[str],
        cause: BaseException | None = None,
    ):
        super().__init__(
            message,
            ErrorContext(
                component="package_manager",
                extra={"package_manager": package_manager, "packages": list(packages)},
            ),
            cause,
        )
        self.package_manager = package_manager
        self.packages = list(packages)


# Stage Errors


class StageError(ScaffoldError):
    """A setup stage failed; carries the stage's display name."""

    error_code = "STAGE_ERROR"
    category = ErrorCategory.STAGE

    def __init__(
        self,
        stage: str,
        message: str,
        cause: BaseException | None = None,
    ):
        super().__init__(
            f"{stage} failed: {message}",
            ErrorContext(stage=stage),
            cause,
        )
        self.stage = stage

    def __str__(self) -> str:
        return self.message


class FeatureError(StageError):
    """An optional feature installer failed."""

    error_code = "FEATURE_ERROR"


class SetupCancelled(ScaffoldError):
    """The operator cancelled the run before anything was written."""

    error_code = "SETUP_CANCELLED"
    category = ErrorCategory.CANCELLED
    severity = ErrorSeverity.LOW


# Helper functions


def is_timeout(error: BaseException) -> bool:
    """Check if an error (or the error it wraps) is a process timeout."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        if isinstance(current, CommandTimeoutError):
            return True
        seen.add(id(current))
        current = getattr(current, "cause", None) or current.__cause__
    return False


def get_error_code(error: BaseException) -> str:
    """Get the error code for an exception."""
    if isinstance(error, ScaffoldError):
        return error.error_code
    return type(error).__name__.upper()


def describe_error(error: BaseException) -> str:
    """Return the operator-facing message for any exception."""
    return str(error) or type(error).__name__
