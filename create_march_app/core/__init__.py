"""
Core Module
===========

Building blocks shared by every setup step:

- Exceptions: Typed hierarchy with error codes and context
- Logging: Console/JSON formatters, stage context and timing
- Process: Async child processes with timeouts and a generator command builder
- Filesystem: Async file operations raising FileSystemError
- Package managers: npm / yarn / pnpm / bun strategies with the bun fallback
"""

# Lazy imports keep ``create_march_app.answers`` importable from core modules
# without an import cycle.

__all__ = [
    # Exceptions
    "ScaffoldError",
    "ValidationError",
    "FileSystemError",
    "ProcessError",
    "PackageManagerError",
    "StageError",
    "FeatureError",
    "SetupCancelled",
    # Logging
    "configure_logging",
    "log_context",
    "Timer",
    # Process
    "run_command",
    "CommandSpec",
    # Filesystem
    "FileSystemService",
    # Package managers
    "PackageManagerService",
    "InstallOptions",
    # Models
    "ExecutionContext",
    "SetupResult",
    "Services",
]


def __getattr__(name):
    """Lazy imports to avoid circular dependencies."""
    if name in (
        "ScaffoldError",
        "ValidationError",
        "FileSystemError",
        "ProcessError",
        "PackageManagerError",
        "StageError",
        "FeatureError",
        "SetupCancelled",
    ):
        from . import exceptions as _exceptions

        return getattr(_exceptions, name)
    elif name in ("configure_logging", "log_context", "Timer"):
        from . import logging as _logging

        return getattr(_logging, name)
    elif name in ("run_command", "CommandSpec"):
        from . import process as _process

        return getattr(_process, name)
    elif name == "FileSystemService":
        from .filesystem import FileSystemService

        return FileSystemService
    elif name in ("PackageManagerService", "InstallOptions"):
        from . import package_manager as _package_manager

        return getattr(_package_manager, name)
    elif name in ("ExecutionContext", "SetupResult", "Services"):
        from . import models as _models

        return getattr(_models, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
