"""
Child Process Utilities
=======================

Provides async subprocess execution with:
- Timeout enforcement (the child is killed on expiry)
- Captured, non-interactive output
- Environment forcing CI mode and no colors
- A small command builder for generator CLIs

Usage:
    from create_march_app.core.process import run_command, CommandSpec

    # Run command with timeout
    result = await run_command(["git", "init"], cwd=project_path, timeout=30)

    # Build generator arguments without spawning anything
    spec = CommandSpec("g", "@nx/react:library", {"directory": "libs/ui"})
    spec.to_args()  # ['g', '@nx/react:library', '--directory=libs/ui']
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Mapping, Sequence

from .exceptions import CommandFailedError, CommandNotFoundError, CommandTimeoutError

logger = logging.getLogger(__name__)

# Maximum output size kept on the result (1MB)
MAX_OUTPUT_SIZE = 1024 * 1024

# Default timeout in seconds
DEFAULT_TIMEOUT = 60

NON_INTERACTIVE_ENV = {
    "CI": "true",
    "FORCE_COLOR": "0",
}


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a finished child process."""

    command: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""


Runner = Callable[..., Awaitable[CommandResult]]


def build_env(extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """Inherit the current environment and force non-interactive output."""
    env = dict(os.environ)
    env.update(NON_INTERACTIVE_ENV)
    if extra:
        env.update(extra)
    return env


def _truncate(data: bytes, max_output: int) -> str:
    text = data.decode("utf-8", errors="replace")
    if len(text) > max_output:
        omitted = len(text) - max_output
        text = text[:max_output] + f"\n... (truncated, {omitted} bytes omitted)"
    return text


async def run_command(
    command: Sequence[str],
    cwd: Path | str | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    env: Mapping[str, str] | None = None,
    check: bool = True,
    max_output: int = MAX_OUTPUT_SIZE,
) -> CommandResult:
    """
    Run a command with a timeout and captured output.

    Args:
        command: Command and arguments as a sequence
        cwd: Working directory (None = current directory)
        timeout: Maximum execution time in seconds
        env: Extra environment variables layered over the non-interactive env
        check: If True, raise on non-zero exit code
        max_output: Maximum output size kept per stream

    Returns:
        CommandResult instance

    Raises:
        CommandNotFoundError: If the executable does not exist
        CommandTimeoutError: If command exceeds timeout
        CommandFailedError: If check=True and command fails
    """
    args = [str(part) for part in command]
    logger.debug("Running command: %s (cwd=%s, timeout=%ss)", quote_command(args), cwd, timeout)

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            cwd=str(cwd) if cwd is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            env=build_env(env),
        )
    except FileNotFoundError as e:
        raise CommandNotFoundError(f"Command not found: {args[0]}", args, e) from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError as e:
        process.kill()
        await process.wait()
        logger.warning("Command timed out after %ss: %s", timeout, quote_command(args))
        raise CommandTimeoutError(args, timeout) from e

    result = CommandResult(
        command=tuple(args),
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=_truncate(stdout, max_output),
        stderr=_truncate(stderr, max_output),
    )

    if check and result.returncode != 0:
        raise CommandFailedError(args, result.returncode, result.stdout, result.stderr)

    return result


@dataclass(frozen=True)
class CommandSpec:
    """
    Abstract description of a generator invocation.

    ``verb`` and ``target`` are positional tokens; ``options`` become
    ``--key=value`` tokens, booleans become ``--key`` / ``--no-key``.
    """

    verb: str
    target: str = ""
    options: Mapping[str, str | bool] = field(default_factory=dict)
    positional: tuple[str, ...] = ()

    def to_args(self) -> list[str]:
        args = [self.verb]
        if self.target:
            args.append(self.target)
        args.extend(self.positional)
        for key, value in self.options.items():
            if isinstance(value, bool):
                args.append(f"--{key}" if value else f"--no-{key}")
            else:
                args.append(f"--{key}={value}")
        return args


def quote_command(command: Sequence[str]) -> str:
    """
    Quote a command sequence for display.

    Args:
        command: Command and arguments

    Returns:
        Shell-safe quoted string
    """
    return " ".join(shlex.quote(str(arg)) for arg in command)
