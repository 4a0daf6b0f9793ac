"""
Validation
==========

Host prerequisite and user input checks. Everything here runs before the
project directory is touched.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from .answers import PackageManager
from .core.exceptions import MissingToolError, ProcessError
from .core.process import run_command

logger = logging.getLogger(__name__)

# Tools every run needs regardless of the chosen stack
BASIC_REQUIREMENTS = ("node", "git")

MAX_NAME_LENGTH = 214
RESERVED_NAMES = frozenset({"node_modules", "favicon.ico", ".git", ".gitignore"})
_NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")

VERSION_CHECK_TIMEOUT = 30


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    message: str = ""

    def __bool__(self) -> bool:
        return self.is_valid


async def _check_tool(tool: str) -> None:
    try:
        await run_command([tool, "--version"], timeout=VERSION_CHECK_TIMEOUT)
    except ProcessError as e:
        logger.debug("Tool check failed for %s: %s", tool, e)
        raise MissingToolError(tool) from e


async def validate_basic_requirements() -> None:
    """
    Verify that node and git are installed.

    Raises:
        MissingToolError: For the first missing tool
    """
    for tool in BASIC_REQUIREMENTS:
        await _check_tool(tool)


async def validate_package_manager(package_manager: PackageManager | str) -> None:
    """Verify the selected package manager responds to ``--version``."""
    name = PackageManager(package_manager).value
    try:
        await run_command([name, "--version"], timeout=VERSION_CHECK_TIMEOUT)
    except ProcessError as e:
        raise MissingToolError(
            name,
            f"Selected package manager '{name}' is not installed or not in PATH. "
            "Please install it and try again.",
        ) from e


def validate_project_name(name: str | None) -> ValidationResult:
    """Check a project name against npm package naming rules."""
    if not name or not isinstance(name, str):
        return ValidationResult(False, "Project name is required")

    if len(name) > MAX_NAME_LENGTH:
        return ValidationResult(False, f"Project name must be less than {MAX_NAME_LENGTH} characters")

    if name.startswith((".", "_")):
        return ValidationResult(False, "Project name cannot start with . or _")

    if not _NAME_PATTERN.match(name):
        return ValidationResult(False, "Project name can only contain lowercase letters, numbers, and dashes")

    if "--" in name or name.startswith("-") or name.endswith("-"):
        return ValidationResult(False, "Project name cannot have consecutive dashes or start/end with dashes")

    if name in RESERVED_NAMES:
        return ValidationResult(False, f"Project name '{name}' is reserved")

    return ValidationResult(True)


async def validate_directory_availability(project_path: Path | str) -> bool:
    """Return True when nothing exists at ``project_path`` yet."""
    return not await asyncio.to_thread(Path(project_path).exists)
