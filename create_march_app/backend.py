"""
Backend Setup
=============

Creates the API application under ``apps/<backend_dir_name>`` and wires the
selected ORM into it.
"""

from __future__ import annotations

import logging
from typing import assert_never

from .answers import BackendAPI, DatabaseProvider, ORMDatabase, PackageManager
from .core.logging import log_step, log_success
from .core.models import ExecutionContext, Services, SetupResult
from .core.process import CommandSpec

logger = logging.getLogger(__name__)

API_PORT = 3001

BACKEND_TSCONFIG = {
    "compilerOptions": {
        "target": "ES2022",
        "module": "NodeNext",
        "moduleResolution": "NodeNext",
        "outDir": "dist",
        "rootDir": "src",
        "strict": True,
        "esModuleInterop": True,
        "skipLibCheck": True,
        "declaration": True,
    },
    "include": ["src"],
}

BACKEND_GITIGNORE = """\
dist/
node_modules/
.env
*.tsbuildinfo
coverage/
"""

TRPC_ROUTER = """\
import { initTRPC } from "@trpc/server";
import { z } from "zod";

const t = initTRPC.create();

export const appRouter = t.router({
  health: t.procedure.query(() => ({ status: "ok", timestamp: new Date().toISOString() })),
  greet: t.procedure
    .input(z.object({ name: z.string() }))
    .query(({ input }) => ({ message: `Hello ${input.name}` })),
});

export type AppRouter = typeof appRouter;
"""

TRPC_SERVER = """\
import * as trpcExpress from "@trpc/server/adapters/express";
import cors from "cors";
import express from "express";

import {{ appRouter }} from "./router.js";

const app = express();
const port = Number(process.env.PORT ?? {port});

app.use(cors());
app.use("/api/trpc", trpcExpress.createExpressMiddleware({{ router: appRouter }}));
app.get("/health", (_req, res) => res.json({{ status: "ok" }}));

app.listen(port, () => {{
  console.log(`API listening on http://localhost:${{port}}`);
}});
"""

APOLLO_SERVER = """\
import {{ ApolloServer }} from "@apollo/server";
import {{ startStandaloneServer }} from "@apollo/server/standalone";

const typeDefs = `#graphql
  type Query {{
    health: String!
  }}
`;

const resolvers = {{
  Query: {{
    health: () => "ok",
  }},
}};

const server = new ApolloServer({{ typeDefs, resolvers }});
const {{ url }} = await startStandaloneServer(server, {{ listen: {{ port: {port} }} }});
console.log(`GraphQL API ready at ${{url}}`);
"""

PRISMA_SCHEMA = """\
generator client {
  provider = "prisma-client-js"
}

datasource db {
  provider = "postgresql"
  url      = env("DATABASE_URL")
}

model User {
  id        String   @id @default(cuid())
  email     String   @unique
  name      String?
  createdAt DateTime @default(now())
  updatedAt DateTime @updatedAt
}
"""

PRISMA_CLIENT = """\
import { PrismaClient } from "@prisma/client";

const globalForPrisma = globalThis as unknown as { prisma: PrismaClient | undefined };

export const prisma = globalForPrisma.prisma ?? new PrismaClient();

if (process.env.NODE_ENV !== "production") globalForPrisma.prisma = prisma;
"""

DRIZZLE_SCHEMA = """\
import { pgTable, text, timestamp, uuid } from "drizzle-orm/pg-core";

export const users = pgTable("users", {
  id: uuid("id").primaryKey().defaultRandom(),
  email: text("email").notNull().unique(),
  name: text("name"),
  createdAt: timestamp("created_at").defaultNow().notNull(),
});
"""

DRIZZLE_CONFIG = """\
import type { Config } from "drizzle-kit";

export default {
  schema: "./src/db/schema.ts",
  out: "./drizzle",
  dialect: "postgresql",
  dbCredentials: { url: process.env.DATABASE_URL! },
} satisfies Config;
"""

DRIZZLE_CLIENT = {
    DatabaseProvider.NEON: """\
import { neon } from "@neondatabase/serverless";
import { drizzle } from "drizzle-orm/neon-http";

export const db = drizzle(neon(process.env.DATABASE_URL!));
""",
    DatabaseProvider.SUPABASE: """\
import { drizzle } from "drizzle-orm/postgres-js";
import postgres from "postgres";

export const db = drizzle(postgres(process.env.DATABASE_URL!, { prepare: false }));
""",
    DatabaseProvider.NONE: """\
import { drizzle } from "drizzle-orm/postgres-js";
import postgres from "postgres";

export const db = drizzle(postgres(process.env.DATABASE_URL!));
""",
}


def nest_package_manager(package_manager: PackageManager) -> str:
    """The Nest CLI does not support bun; npm is used in its place."""
    return "npm" if package_manager is PackageManager.BUN else package_manager.value


def nest_new_spec(app_name: str, package_manager: PackageManager) -> CommandSpec:
    return CommandSpec(
        "@nestjs/cli@latest",
        "new",
        {
            "package-manager": nest_package_manager(package_manager),
            "skip-git": True,
            "skip-install": True,
        },
        positional=(app_name,),
    )


class BackendSetup:
    def __init__(self, services: Services):
        self.services = services

    async def setup(self, ctx: ExecutionContext) -> SetupResult:
        backend = ctx.answers.backend_api
        match backend:
            case BackendAPI.TRPC:
                result = await self.setup_express_trpc(ctx)
            case BackendAPI.NESTJS:
                result = await self.setup_nestjs(ctx)
            case BackendAPI.GRAPHQL_APOLLO:
                result = await self.setup_apollo(ctx)
            case BackendAPI.NONE:
                logger.info("Skipping backend setup as requested")
                return SetupResult.ok("Backend setup skipped")
            case _:
                assert_never(backend)

        orm_warnings = await self.setup_database(ctx)
        return SetupResult.ok(result.message, [*result.warnings, *orm_warnings])

    async def _write_node_app(self, ctx: ExecutionContext, entry_files: dict[str, str]) -> None:
        fs = self.services.fs
        backend = ctx.backend_path
        await fs.write_json(
            backend / "package.json",
            {
                "name": backend.name,
                "version": "0.1.0",
                "private": True,
                "type": "module",
                "main": "dist/index.js",
                "scripts": {
                    "dev": "tsx watch src/index.ts",
                    "build": "tsc",
                    "start": "node dist/index.js",
                    "type-check": "tsc --noEmit",
                },
            },
        )
        await fs.write_json(backend / "tsconfig.json", BACKEND_TSCONFIG)
        await fs.write_file(backend / ".gitignore", BACKEND_GITIGNORE)
        for relative, content in entry_files.items():
            await fs.write_file(backend / relative, content)

    async def setup_express_trpc(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up Express + tRPC...")
        await self._write_node_app(
            ctx,
            {
                "src/router.ts": TRPC_ROUTER,
                "src/index.ts": TRPC_SERVER.format(port=API_PORT),
            },
        )
        await self.services.install(ctx, ["express", "cors", "@trpc/server", "zod"], ctx.backend_path)
        await self.services.install(
            ctx,
            ["typescript", "tsx", "@types/node", "@types/express", "@types/cors"],
            ctx.backend_path,
            dev=True,
        )
        log_success(logger, "Express + tRPC setup completed successfully!")
        return SetupResult.ok("Express + tRPC setup completed successfully!")

    async def setup_nestjs(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up NestJS...")
        spec = nest_new_spec(ctx.backend_path.name, ctx.answers.package_manager)
        await self.services.fs.ensure_directory(ctx.apps_path)
        await self.services.execute(ctx, spec.to_args(), ctx.apps_path)

        warnings: list[str] = []
        if ctx.answers.package_manager is PackageManager.BUN:
            warnings.append("The NestJS CLI does not support bun; the API was generated for npm")
        log_success(logger, "NestJS setup completed successfully!")
        return SetupResult.ok("NestJS setup completed successfully!", warnings)

    async def setup_apollo(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up Apollo GraphQL...")
        await self._write_node_app(ctx, {"src/index.ts": APOLLO_SERVER.format(port=API_PORT)})
        await self.services.install(ctx, ["@apollo/server", "graphql"], ctx.backend_path)
        await self.services.install(ctx, ["typescript", "tsx", "@types/node"], ctx.backend_path, dev=True)
        log_success(logger, "Apollo GraphQL setup completed successfully!")
        return SetupResult.ok("Apollo GraphQL setup completed successfully!")

    async def setup_database(self, ctx: ExecutionContext) -> list[str]:
        """Wire the chosen ORM into the backend; returns warnings."""
        orm = ctx.answers.orm_database
        match orm:
            case ORMDatabase.PRISMA:
                return await self._setup_prisma(ctx)
            case ORMDatabase.DRIZZLE:
                return await self._setup_drizzle(ctx)
            case ORMDatabase.NONE:
                return []
            case _:
                assert_never(orm)

    async def _setup_prisma(self, ctx: ExecutionContext) -> list[str]:
        log_step(logger, "Setting up Prisma...")
        fs = self.services.fs
        backend = ctx.backend_path
        await self.services.install(ctx, ["@prisma/client"], backend)
        await self.services.install(ctx, ["prisma"], backend, dev=True)
        await fs.write_file(backend / "prisma" / "schema.prisma", PRISMA_SCHEMA)
        await fs.write_file(backend / "src" / "lib" / "prisma.ts", PRISMA_CLIENT)
        await fs.update_json_file(
            backend / "package.json",
            {"scripts": {"db:generate": "prisma generate", "db:push": "prisma db push"}},
        )
        log_success(logger, "Prisma configured")
        return ["Run 'prisma generate' after setup to generate the Prisma client"]

    async def _setup_drizzle(self, ctx: ExecutionContext) -> list[str]:
        log_step(logger, "Setting up Drizzle ORM...")
        fs = self.services.fs
        backend = ctx.backend_path
        provider = ctx.answers.database_provider

        driver = "@neondatabase/serverless" if provider is DatabaseProvider.NEON else "postgres"
        await self.services.install(ctx, ["drizzle-orm", driver], backend)
        await self.services.install(ctx, ["drizzle-kit"], backend, dev=True)
        await fs.write_file(backend / "src" / "db" / "schema.ts", DRIZZLE_SCHEMA)
        await fs.write_file(backend / "src" / "db" / "index.ts", DRIZZLE_CLIENT[provider])
        await fs.write_file(backend / "drizzle.config.ts", DRIZZLE_CONFIG)
        await fs.update_json_file(
            backend / "package.json",
            {"scripts": {"db:generate": "drizzle-kit generate", "db:push": "drizzle-kit push"}},
        )
        log_success(logger, "Drizzle ORM configured")
        return []
