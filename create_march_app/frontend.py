"""
Frontend Setup
==============

Creates the primary application under ``apps/<app_dir_name>`` for the
chosen framework, and the shared shadcn/ui library used by it.

Standard layouts are written from small templates and their dependencies
installed with the run's package manager; Nx workspaces use the matching
Nx generator instead.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, assert_never

from .answers import Frontend, MonorepoTool, PackageManager, ProjectAnswers
from .core.logging import log_step, log_success
from .core.models import ExecutionContext, Services, SetupResult
from .nx import NxCliService, generator_spec

logger = logging.getLogger(__name__)

UI_PACKAGE_NAME = "@workspace/ui"

APP_GITIGNORE = """\
# Build output
.next/
out/
build/
dist/
.astro/

# Local env files
.env*.local

# TypeScript
*.tsbuildinfo
next-env.d.ts

# Testing
coverage/

# Cache
.eslintcache
"""

TAILWIND_CSS = '@import "tailwindcss";\n'

POSTCSS_CONFIG = """\
export default {
  plugins: {
    "@tailwindcss/postcss": {},
  },
};
"""

TAILWIND_PACKAGES = ("tailwindcss", "@tailwindcss/postcss", "postcss")

UI_LIBRARY_DEPENDENCIES = {
    "@radix-ui/react-slot": "^1.0.2",
    "class-variance-authority": "^0.7.0",
    "clsx": "^2.1.0",
    "lucide-react": "^0.344.0",
    "tailwind-merge": "^2.2.1",
}

UI_LIBRARY_DEV_DEPENDENCIES = {
    "@types/react": "^18.2.61",
    "@types/react-dom": "^18.2.19",
    "react": "^18.2.0",
    "react-dom": "^18.2.0",
    "tailwindcss": "^4.0.0",
    "typescript": "^5.3.3",
}

UI_UTILS = """\
import { type ClassValue, clsx } from "clsx";
import { twMerge } from "tailwind-merge";

export function cn(...inputs: ClassValue[]) {
  return twMerge(clsx(inputs));
}
"""

UI_BUTTON = """\
import { Slot } from "@radix-ui/react-slot";
import { cva, type VariantProps } from "class-variance-authority";
import * as React from "react";

import { cn } from "../lib/utils";

const buttonVariants = cva(
  "inline-flex items-center justify-center rounded-md text-sm font-medium transition-colors disabled:opacity-50",
  {
    variants: {
      variant: {
        default: "bg-primary text-primary-foreground hover:bg-primary/90",
        outline: "border border-input bg-background hover:bg-accent",
        ghost: "hover:bg-accent hover:text-accent-foreground",
      },
      size: {
        default: "h-10 px-4 py-2",
        sm: "h-9 px-3",
        lg: "h-11 px-8",
      },
    },
    defaultVariants: { variant: "default", size: "default" },
  },
);

export interface ButtonProps
  extends React.ButtonHTMLAttributes<HTMLButtonElement>,
    VariantProps<typeof buttonVariants> {
  asChild?: boolean;
}

export const Button = React.forwardRef<HTMLButtonElement, ButtonProps>(
  ({ className, variant, size, asChild = false, ...props }, ref) => {
    const Comp = asChild ? Slot : "button";
    return <Comp className={cn(buttonVariants({ variant, size, className }))} ref={ref} {...props} />;
  },
);
Button.displayName = "Button";

export { buttonVariants };
"""

UI_INDEX = """\
export * from "./components/button";
export { cn } from "./lib/utils";
"""

NEXT_APP_LAYOUT = """\
import type {{ Metadata }} from "next";
{css_import}
export const metadata: Metadata = {{
  title: "{title}",
  description: "Generated by create-march-app",
}};

export default function RootLayout({{ children }}: {{ children: React.ReactNode }}) {{
  return (
    <html lang="en">
      <body>{{children}}</body>
    </html>
  );
}}
"""

NEXT_APP_PAGE = """\
export default function Home() {{
  return (
    <main>
      <h1>{title}</h1>
      <p>Edit src/app/page.tsx to get started.</p>
    </main>
  );
}}
"""

NEXT_PAGES_APP = """\
import type {{ AppProps }} from "next/app";
{css_import}
export default function App({{ Component, pageProps }}: AppProps) {{
  return <Component {{...pageProps}} />;
}}
"""

NEXT_PAGES_INDEX = """\
export default function Home() {{
  return (
    <main>
      <h1>{title}</h1>
      <p>Edit src/pages/index.tsx to get started.</p>
    </main>
  );
}}
"""

NEXT_CONFIG = """\
import type {{ NextConfig }} from "next";

const nextConfig: NextConfig = {{
  reactStrictMode: true,{transpile}
}};

export default nextConfig;
"""

VITE_CONFIG = """\
import react from "@vitejs/plugin-react";{tailwind_import}
import {{ defineConfig }} from "vite";

export default defineConfig({{
  plugins: [react(){tailwind_plugin}],
  server: {{ port: 3000 }},
}});
"""

VITE_INDEX_HTML = """\
<!doctype html>
<html lang="en">
  <head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{title}</title>
  </head>
  <body>
    <div id="root"></div>
    <script type="module" src="/src/main.tsx"></script>
  </body>
</html>
"""

VITE_MAIN = """\
import { StrictMode } from "react";
import { createRoot } from "react-dom/client";

import App from "./App";
import "./index.css";

createRoot(document.getElementById("root")!).render(
  <StrictMode>
    <App />
  </StrictMode>,
);
"""

VITE_APP = """\
export default function App() {{
  return (
    <main>
      <h1>{title}</h1>
      <p>Edit src/App.tsx to get started.</p>
    </main>
  );
}}
"""

ASTRO_CONFIG = """\
import {{ defineConfig }} from "astro/config";{imports}

export default defineConfig({{
  server: {{ port: 3000 }},{integrations}
}});
"""

ASTRO_INDEX = """\
---
{css_import}---

<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{title}</title>
  </head>
  <body>
    <h1>{title}</h1>
    <p>Edit src/pages/index.astro to get started.</p>
  </body>
</html>
"""


def workspace_version(package_manager: PackageManager) -> str:
    """Version specifier for a local workspace package."""
    return "*" if package_manager is PackageManager.NPM else "workspace:*"


def ui_library_path(ctx: ExecutionContext) -> Path:
    if ctx.answers.monorepo_tool is MonorepoTool.NX:
        return ctx.project_path / "libs" / "ui"
    return ctx.packages_path / "ui"


def app_tsconfig(answers: ProjectAnswers) -> dict[str, Any]:
    compiler_options: dict[str, Any] = {
        "target": "ES2022",
        "lib": ["dom", "dom.iterable", "esnext"],
        "strict": True,
        "noEmit": True,
        "esModuleInterop": True,
        "module": "esnext",
        "moduleResolution": "bundler",
        "resolveJsonModule": True,
        "isolatedModules": True,
        "jsx": "preserve" if answers.is_nextjs else "react-jsx",
        "skipLibCheck": True,
        "paths": {"@/*": ["./src/*"]},
    }
    config: dict[str, Any] = {"compilerOptions": compiler_options, "include": ["src"], "exclude": ["node_modules"]}
    if answers.is_nextjs:
        compiler_options["plugins"] = [{"name": "next"}]
        config["include"] = ["next-env.d.ts", "src/**/*.ts", "src/**/*.tsx", ".next/types/**/*.ts"]
    return config


class UILibrarySetup:
    """Shared shadcn/ui component library consumed by the apps."""

    def __init__(self, services: Services):
        self.services = services

    async def setup(self, ctx: ExecutionContext) -> SetupResult:
        if not ctx.answers.use_shadcn:
            return SetupResult.ok("shadcn/ui setup skipped")

        log_step(logger, "Setting up shadcn/ui as shared library...")
        fs = self.services.fs
        lib_path = ui_library_path(ctx)

        components = {
            "$schema": "https://ui.shadcn.com/schema.json",
            "style": "new-york",
            "rsc": ctx.answers.is_nextjs,
            "tsx": True,
            "tailwind": {
                "config": "",
                "css": "src/styles/globals.css",
                "baseColor": ctx.answers.base_color,
                "cssVariables": True,
                "prefix": "",
            },
            "aliases": {
                "components": "@/components",
                "utils": "@/lib/utils",
                "ui": "@/components",
                "lib": "@/lib",
                "hooks": "@/hooks",
            },
            "iconLibrary": "lucide",
        }
        package_json = {
            "name": UI_PACKAGE_NAME,
            "version": "0.0.0",
            "private": True,
            "type": "module",
            "exports": {".": "./src/index.ts", "./styles": "./src/styles/globals.css"},
            "scripts": {"type-check": "tsc --noEmit"},
            "dependencies": UI_LIBRARY_DEPENDENCIES,
            "devDependencies": UI_LIBRARY_DEV_DEPENDENCIES,
            "peerDependencies": {"react": "^18.2.0", "react-dom": "^18.2.0"},
        }
        tsconfig = {
            "compilerOptions": {
                "target": "ES2022",
                "module": "esnext",
                "moduleResolution": "bundler",
                "jsx": "react-jsx",
                "strict": True,
                "declaration": True,
                "skipLibCheck": True,
                "paths": {"@/*": ["./src/*"]},
            },
            "include": ["src"],
        }

        await fs.write_json(lib_path / "components.json", components)
        await fs.write_json(lib_path / "package.json", package_json)
        await fs.write_json(lib_path / "tsconfig.json", tsconfig)
        await fs.write_file(lib_path / "src" / "lib" / "utils.ts", UI_UTILS)
        await fs.write_file(lib_path / "src" / "components" / "button.tsx", UI_BUTTON)
        await fs.write_file(lib_path / "src" / "styles" / "globals.css", TAILWIND_CSS)
        await fs.write_file(lib_path / "src" / "index.ts", UI_INDEX)
        await fs.write_file(lib_path / ".gitignore", "dist/\nnode_modules/\n*.tsbuildinfo\n")

        log_success(logger, "shadcn/ui library setup complete")
        return SetupResult.ok("shadcn/ui library setup complete")


class FrontendSetup:
    def __init__(self, services: Services):
        self.services = services
        self.nx = NxCliService(services)

    async def setup(self, ctx: ExecutionContext) -> SetupResult:
        frontend = ctx.answers.frontend
        match frontend:
            case Frontend.NEXTJS_APP:
                return await self.setup_nextjs(ctx, app_router=True)
            case Frontend.NEXTJS_PAGES:
                return await self.setup_nextjs(ctx, app_router=False)
            case Frontend.VITE:
                return await self.setup_vite(ctx)
            case Frontend.ASTRO:
                return await self.setup_astro(ctx)
            case Frontend.NONE:
                logger.info("Skipping frontend setup as requested")
                return SetupResult.ok("Frontend setup skipped")
            case _:
                assert_never(frontend)

    # Next.js

    async def setup_nextjs(self, ctx: ExecutionContext, app_router: bool) -> SetupResult:
        log_step(logger, "Setting up Next.js...")
        if ctx.answers.monorepo_tool is MonorepoTool.NX:
            await self._generate_with_nx(
                ctx,
                "@nx/next:app",
                {"style": "css", "appDir": app_router, "e2eTestRunner": "none", "skipFormat": True},
            )
        else:
            await self._write_nextjs_app(ctx, app_router)
            await self._install_app_dependencies(
                ctx,
                ["next", "react", "react-dom"],
                ["typescript", "@types/node", "@types/react", "@types/react-dom"],
            )
        await self._finish_app(ctx)
        log_success(logger, "Next.js setup completed successfully!")
        return SetupResult.ok("Next.js setup completed successfully!")

    async def _write_nextjs_app(self, ctx: ExecutionContext, app_router: bool) -> None:
        fs = self.services.fs
        app = ctx.app_path
        answers = ctx.answers
        title = ctx.project_name
        css_import = 'import "./globals.css";\n' if answers.use_tailwind else ""

        scripts = {
            "dev": "next dev --turbopack" if answers.monorepo_tool is MonorepoTool.TURBO else "next dev",
            "build": "next build",
            "start": "next start",
            "type-check": "tsc --noEmit",
        }
        await fs.write_json(
            app / "package.json",
            {"name": app.name, "version": "0.1.0", "private": True, "scripts": scripts},
        )
        await fs.write_json(app / "tsconfig.json", app_tsconfig(answers))
        transpile = f'\n  transpilePackages: ["{UI_PACKAGE_NAME}"],' if answers.use_shadcn else ""
        await fs.write_file(app / "next.config.ts", NEXT_CONFIG.format(transpile=transpile))

        if app_router:
            await fs.write_file(
                app / "src" / "app" / "layout.tsx",
                NEXT_APP_LAYOUT.format(css_import=css_import, title=title),
            )
            await fs.write_file(app / "src" / "app" / "page.tsx", NEXT_APP_PAGE.format(title=title))
            css_path = app / "src" / "app" / "globals.css"
        else:
            pages_css = 'import "../styles/globals.css";\n' if answers.use_tailwind else ""
            await fs.write_file(app / "src" / "pages" / "_app.tsx", NEXT_PAGES_APP.format(css_import=pages_css))
            await fs.write_file(app / "src" / "pages" / "index.tsx", NEXT_PAGES_INDEX.format(title=title))
            css_path = app / "src" / "styles" / "globals.css"

        if answers.use_tailwind:
            await fs.write_file(css_path, TAILWIND_CSS)
        await fs.ensure_directory(app / "public")
        await fs.write_file(app / ".gitignore", APP_GITIGNORE)

    # Vite

    async def setup_vite(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up Vite + React...")
        if ctx.answers.monorepo_tool is MonorepoTool.NX:
            await self._generate_with_nx(
                ctx,
                "@nx/react:app",
                {"bundler": "vite", "style": "css", "e2eTestRunner": "none", "skipFormat": True},
            )
        else:
            fs = self.services.fs
            app = ctx.app_path
            title = ctx.project_name
            await fs.write_json(
                app / "package.json",
                {
                    "name": app.name,
                    "version": "0.1.0",
                    "private": True,
                    "type": "module",
                    "scripts": {
                        "dev": "vite",
                        "build": "tsc -b && vite build",
                        "preview": "vite preview",
                        "type-check": "tsc --noEmit",
                    },
                },
            )
            await fs.write_json(app / "tsconfig.json", app_tsconfig(ctx.answers))
            tailwind = ctx.answers.use_tailwind
            await fs.write_file(
                app / "vite.config.ts",
                VITE_CONFIG.format(
                    tailwind_import='\nimport tailwindcss from "@tailwindcss/vite";' if tailwind else "",
                    tailwind_plugin=", tailwindcss()" if tailwind else "",
                ),
            )
            await fs.write_file(app / "index.html", VITE_INDEX_HTML.format(title=title))
            await fs.write_file(app / "src" / "main.tsx", VITE_MAIN)
            await fs.write_file(app / "src" / "App.tsx", VITE_APP.format(title=title))
            await fs.write_file(app / "src" / "index.css", TAILWIND_CSS if ctx.answers.use_tailwind else "")
            await fs.write_file(app / ".gitignore", APP_GITIGNORE)
            await self._install_app_dependencies(
                ctx,
                ["react", "react-dom"],
                ["vite", "@vitejs/plugin-react", "typescript", "@types/react", "@types/react-dom"],
            )
        await self._finish_app(ctx)
        log_success(logger, "Vite setup completed successfully!")
        return SetupResult.ok("Vite setup completed successfully!")

    # Astro

    async def setup_astro(self, ctx: ExecutionContext) -> SetupResult:
        log_step(logger, "Setting up Astro...")
        fs = self.services.fs
        app = ctx.app_path
        answers = ctx.answers
        warnings: list[str] = []

        if answers.monorepo_tool is MonorepoTool.NX:
            warnings.append("Nx has no first-party Astro generator; the app was created from a template")

        react = answers.use_shadcn
        imports = '\nimport react from "@astrojs/react";' if react else ""
        integrations = "\n  integrations: [react()]," if react else ""
        css_import = 'import "../styles/global.css";\n' if answers.use_tailwind else ""

        await fs.write_json(
            app / "package.json",
            {
                "name": app.name,
                "version": "0.1.0",
                "private": True,
                "type": "module",
                "scripts": {
                    "dev": "astro dev",
                    "build": "astro build",
                    "preview": "astro preview",
                    "type-check": "astro check",
                },
            },
        )
        await fs.write_json(app / "tsconfig.json", {"extends": "astro/tsconfigs/strict"})
        await fs.write_file(
            app / "astro.config.mjs",
            ASTRO_CONFIG.format(imports=imports, integrations=integrations),
        )
        await fs.write_file(
            app / "src" / "pages" / "index.astro",
            ASTRO_INDEX.format(css_import=css_import, title=ctx.project_name),
        )
        if answers.use_tailwind:
            await fs.write_file(app / "src" / "styles" / "global.css", TAILWIND_CSS)
        await fs.write_file(app / ".gitignore", APP_GITIGNORE)

        dependencies = ["astro"]
        if react:
            dependencies += ["@astrojs/react", "react", "react-dom"]
        await self._install_app_dependencies(ctx, dependencies, ["typescript", "@astrojs/check"])
        await self._finish_app(ctx)

        log_success(logger, "Astro setup completed successfully!")
        return SetupResult.ok("Astro setup completed successfully!", warnings)

    # Shared steps

    async def _generate_with_nx(self, ctx: ExecutionContext, generator: str, options: dict[str, str | bool]) -> None:
        directory = ctx.app_path.relative_to(ctx.project_path).as_posix()
        spec = generator_spec(generator, ctx.app_path.name, {"directory": directory, **options})
        await self.nx.run_generator(ctx, spec)

    async def _install_app_dependencies(
        self,
        ctx: ExecutionContext,
        dependencies: list[str],
        dev_dependencies: list[str],
    ) -> None:
        await self.services.install(ctx, dependencies, ctx.app_path)
        await self.services.install(ctx, dev_dependencies, ctx.app_path, dev=True)

    async def _finish_app(self, ctx: ExecutionContext) -> None:
        """Tailwind tooling and the shared UI library dependency."""
        answers = ctx.answers
        fs = self.services.fs
        if answers.use_tailwind and answers.frontend is not Frontend.VITE:
            await fs.write_file(ctx.app_path / "postcss.config.mjs", POSTCSS_CONFIG)
        if answers.use_tailwind:
            packages = list(TAILWIND_PACKAGES)
            if answers.frontend is Frontend.VITE:
                packages = ["tailwindcss", "@tailwindcss/vite"]
            await self.services.install(ctx, packages, ctx.app_path, dev=True)

        if answers.use_shadcn:
            package_path = ctx.app_path / "package.json"
            if await fs.file_exists(package_path):
                await fs.update_json_file(
                    package_path,
                    {"dependencies": {UI_PACKAGE_NAME: workspace_version(answers.package_manager)}},
                )
