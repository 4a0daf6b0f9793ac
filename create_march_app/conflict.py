"""Handling of a target directory that already exists."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import assert_never

from .core.exceptions import SetupCancelled
from .core.filesystem import FileSystemService
from .core.logging import log_step, log_success

logger = logging.getLogger(__name__)


class ConflictAction(str, Enum):
    CANCEL = "cancel"
    REMOVE = "remove"
    CONTINUE = "continue"


async def resolve_directory_conflict(
    project_path: Path | str,
    action: ConflictAction | str,
    fs: FileSystemService | None = None,
) -> None:
    """
    Apply the chosen action when ``project_path`` already exists.

    A missing directory is not a conflict and nothing happens.

    Raises:
        SetupCancelled: For CANCEL, before anything is written
        FileSystemError: If REMOVE cannot delete the directory
    """
    project_path = Path(project_path)
    fs = fs or FileSystemService()
    if not await fs.file_exists(project_path):
        return

    action = ConflictAction(action)
    match action:
        case ConflictAction.CANCEL:
            logger.info("Operation cancelled. Please choose a different project name.")
            raise SetupCancelled(f"Directory {project_path} already exists")
        case ConflictAction.REMOVE:
            log_step(logger, "Removing existing directory...")
            await fs.remove(project_path)
            log_success(logger, "Existing directory removed")
        case ConflictAction.CONTINUE:
            logger.warning("Using existing directory %s. This may cause conflicts.", project_path)
        case _:
            assert_never(action)
