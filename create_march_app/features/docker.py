"""Docker configuration."""

from __future__ import annotations

import logging

import yaml

from ..answers import ORMDatabase
from ..core.filesystem import ConfigFile
from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services

logger = logging.getLogger(__name__)

NODE_IMAGE = "node:20-alpine"

DOCKERIGNORE = """\
node_modules
.next
dist
.git
.env
.env.local
coverage
*.log
"""


def dockerfile(ctx: ExecutionContext) -> str:
    pm = ctx.answers.package_manager.value
    return f"""\
FROM {NODE_IMAGE} AS deps
WORKDIR /app
COPY . .
RUN corepack enable || true
RUN {pm} install

FROM deps AS builder
WORKDIR /app
RUN {pm} run build

FROM {NODE_IMAGE} AS runner
WORKDIR /app
ENV NODE_ENV=production
COPY --from=builder /app .
EXPOSE 3000
CMD ["{pm}", "run", "start"]
"""


def compose_file(ctx: ExecutionContext) -> dict:
    services: dict = {
        "app": {
            "build": {"context": ".", "dockerfile": "Dockerfile"},
            "ports": ["3000:3000"],
            "env_file": [".env"],
        }
    }
    if ctx.answers.orm_database is not ORMDatabase.NONE:
        services["app"]["depends_on"] = ["db"]
        services["db"] = {
            "image": "postgres:16-alpine",
            "environment": {
                "POSTGRES_USER": "postgres",
                "POSTGRES_PASSWORD": "postgres",
                "POSTGRES_DB": ctx.project_name,
            },
            "ports": ["5432:5432"],
            "volumes": ["db-data:/var/lib/postgresql/data"],
        }
        return {"services": services, "volumes": {"db-data": {}}}
    return {"services": services}


async def setup_docker(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up Docker configuration...")
    # Files from a reused directory are kept
    await services.fs.write_config_files(
        ctx.project_path,
        [
            ConfigFile("Dockerfile", dockerfile(ctx)),
            ConfigFile(".dockerignore", DOCKERIGNORE),
            ConfigFile("docker-compose.yml", yaml.safe_dump(compose_file(ctx), sort_keys=False)),
        ],
    )
    log_success(logger, "Docker configuration created")
