"""
Filesystem Service
==================

Async wrappers over directory and file operations with:
- Atomic writes on POSIX (write-to-temp then os.replace)
- Explicit UTF-8 encoding
- One typed failure: FileSystemError carrying the failing path

Every public coroutine either succeeds or raises FileSystemError. Blocking
calls run in a worker thread so the event loop stays responsive while a
spinner is shown.

Usage:
    fs = FileSystemService()
    await fs.write_json(project / "package.json", {"name": "demo"})
    data = await fs.read_json(project / "package.json")
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import sys
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from .exceptions import FileSystemError
from .logging import log_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigFile:
    """A file to write relative to a base directory."""

    path: str
    content: str
    overwrite: bool = False


def _write_text_atomic(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Write via a sibling temp file and ``os.replace`` so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        encoding=encoding,
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    )
    tmp = Path(handle.name)
    try:
        with handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        _replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _replace(src: Path, dst: Path) -> None:
    # Windows refuses to replace a locked destination; retry as unlink + rename
    try:
        os.replace(src, dst)
    except PermissionError:
        if sys.platform != "win32":
            raise
        dst.unlink(missing_ok=True)
        src.rename(dst)


def _read_text(path: Path, encoding: str = "utf-8") -> str:
    return path.read_text(encoding=encoding)


def _append_text(path: Path, content: str, encoding: str = "utf-8") -> None:
    with path.open("a", encoding=encoding) as stream:
        stream.write(content)


def _remove_tree(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def merge_updates(document: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """
    Shallow-merge ``updates`` into ``document``.

    Dict values are merged one level deep (so new scripts are added next to
    existing ones); every other value replaces the existing one.
    """
    merged = dict(document)
    for key, value in updates.items():
        existing = merged.get(key)
        if isinstance(value, dict) and isinstance(existing, dict):
            merged[key] = {**existing, **value}
        else:
            merged[key] = value
    return merged


class FileSystemService:
    """Scoped filesystem operations with typed failures."""

    def __init__(self, app_dir_name: str = "web", backend_dir_name: str = "api"):
        self.app_dir_name = app_dir_name
        self.backend_dir_name = backend_dir_name

    async def ensure_directory(self, dir_path: Path | str) -> None:
        dir_path = Path(dir_path)
        try:
            await asyncio.to_thread(dir_path.mkdir, parents=True, exist_ok=True)
        except OSError as e:
            raise FileSystemError(f"Failed to ensure directory: {dir_path}", dir_path, e) from e
        logger.debug("Directory ensured: %s", dir_path)

    async def write_file(self, file_path: Path | str, content: str) -> None:
        file_path = Path(file_path)
        try:
            await asyncio.to_thread(_write_text_atomic, file_path, content)
        except OSError as e:
            raise FileSystemError(f"Failed to write file: {file_path}", file_path, e) from e
        logger.debug("File written: %s", file_path)

    async def append_file(self, file_path: Path | str, content: str) -> None:
        file_path = Path(file_path)
        try:
            await asyncio.to_thread(_append_text, file_path, content)
        except OSError as e:
            raise FileSystemError(f"Failed to append to file: {file_path}", file_path, e) from e
        logger.debug("File appended: %s", file_path)

    async def write_json(self, file_path: Path | str, data: Any, indent: int = 2) -> None:
        file_path = Path(file_path)
        try:
            content = json.dumps(data, indent=indent, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as e:
            raise FileSystemError(f"Failed to serialize JSON file: {file_path}", file_path, e) from e
        try:
            await asyncio.to_thread(_write_text_atomic, file_path, content)
        except OSError as e:
            raise FileSystemError(f"Failed to write JSON file: {file_path}", file_path, e) from e
        logger.debug("JSON file written: %s", file_path)

    async def read_file(self, file_path: Path | str) -> str:
        file_path = Path(file_path)
        try:
            return await asyncio.to_thread(_read_text, file_path)
        except OSError as e:
            raise FileSystemError(f"Failed to read file: {file_path}", file_path, e) from e

    async def read_json(self, file_path: Path | str) -> Any:
        content = await self.read_file(file_path)
        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise FileSystemError(f"Failed to read JSON file: {file_path}", file_path, e) from e

    async def file_exists(self, file_path: Path | str) -> bool:
        return await asyncio.to_thread(Path(file_path).exists)

    async def update_json_file(self, file_path: Path | str, updates: dict[str, Any]) -> dict[str, Any]:
        """Read a JSON object, merge ``updates`` into it and write it back."""
        document = await self.read_json(file_path)
        if not isinstance(document, dict):
            raise FileSystemError(f"Expected a JSON object in {file_path}", file_path)
        merged = merge_updates(document, updates)
        await self.write_json(file_path, merged)
        log_config(logger, "Updated %s", Path(file_path).name)
        return merged

    async def append_or_create(self, file_path: Path | str, content: str) -> None:
        """
        Append ``content`` to a file that other steps may already have created.

        Existence is checked first; if the append itself fails the file is
        recreated with ``content`` alone.
        """
        file_path = Path(file_path)
        if await self.file_exists(file_path):
            try:
                await self.append_file(file_path, content)
                return
            except FileSystemError as e:
                logger.warning("Could not update existing %s, creating new one (%s)", file_path.name, e)
        await self.write_file(file_path, content)

    async def remove(self, path: Path | str) -> None:
        path = Path(path)
        if not await self.file_exists(path):
            return
        try:
            await asyncio.to_thread(_remove_tree, path)
        except OSError as e:
            raise FileSystemError(f"Failed to remove: {path}", path, e) from e
        logger.debug("Removed: %s", path)

    async def write_config_files(self, base_path: Path | str, config_files: Iterable[ConfigFile]) -> None:
        """Write files in order, skipping existing ones unless ``overwrite`` is set."""
        base_path = Path(base_path)
        for config_file in config_files:
            full_path = base_path / config_file.path
            if not config_file.overwrite and await self.file_exists(full_path):
                logger.warning("Skipping existing file: %s", full_path)
                continue
            await self.write_file(full_path, config_file.content)
            log_config(logger, "Config file written: %s", config_file.path)

    def resolve_app_path(self, project_path: Path | str, app_name: str | None = None) -> Path:
        return Path(project_path) / "apps" / (app_name or self.app_dir_name)

    def resolve_backend_path(self, project_path: Path | str, backend_name: str | None = None) -> Path:
        return Path(project_path) / "apps" / (backend_name or self.backend_dir_name)

    def resolve_packages_path(self, project_path: Path | str) -> Path:
        return Path(project_path) / "packages"
