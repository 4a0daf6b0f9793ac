"""Realtime collaboration with Liveblocks."""

from __future__ import annotations

import logging

from ..answers import Frontend
from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services
from .env import append_app_env

logger = logging.getLogger(__name__)

LIVEBLOCKS_CONFIG = """\
import {{ createClient }} from "@liveblocks/client";
import {{ createRoomContext }} from "@liveblocks/react";

const client = createClient({{
  publicApiKey: {key_expression},
}});

type Presence = {{ cursor: {{ x: number; y: number }} | null }};
type Storage = {{ count: number }};

export const {{
  RoomProvider,
  useMyPresence,
  useOthers,
  useStorage,
  useMutation,
}} = createRoomContext<Presence, Storage>(client);
"""


async def setup_realtime_collaboration(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up Liveblocks...")
    vite = ctx.answers.frontend is Frontend.VITE
    key_expression = (
        "import.meta.env.VITE_LIVEBLOCKS_PUBLIC_KEY" if vite else "process.env.NEXT_PUBLIC_LIVEBLOCKS_PUBLIC_KEY!"
    )

    await services.install(ctx, ["@liveblocks/client", "@liveblocks/react"], ctx.app_path)
    await services.fs.write_file(
        ctx.app_path / "src" / "liveblocks" / "index.ts",
        LIVEBLOCKS_CONFIG.format(key_expression=key_expression),
    )
    env_key = "VITE_LIVEBLOCKS_PUBLIC_KEY" if vite else "NEXT_PUBLIC_LIVEBLOCKS_PUBLIC_KEY"
    await append_app_env(ctx, services, f'# Liveblocks\n{env_key}="pk_dev_..."\n', "Liveblocks")
    log_success(logger, "Realtime collaboration setup completed")
