"""Environment template helpers shared by feature installers."""

from __future__ import annotations

import logging

from ..core.models import ExecutionContext, Services

logger = logging.getLogger(__name__)

API_ENV = """\
# API Configuration
NEXT_PUBLIC_API_URL="http://localhost:3001"
NEXT_PUBLIC_TRPC_URL="http://localhost:3001/api/trpc"
"""


async def append_app_env(ctx: ExecutionContext, services: Services, content: str, label: str) -> None:
    """Add ``content`` to the app's ``.env.example`` without replacing earlier entries."""
    await services.fs.append_or_create(ctx.app_path / ".env.example", content)
    logger.info("Updated .env.example with %s configuration", label)


async def setup_api_connection(ctx: ExecutionContext, services: Services) -> None:
    await append_app_env(ctx, services, API_ENV, "API connection")
