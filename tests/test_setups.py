"""Tests for the monorepo, frontend, UI library, backend and linting setups."""

import json
from string import Formatter

import pytest

from conftest import FakeRunner
from create_march_app.answers import (
    BackendAPI,
    DatabaseProvider,
    Frontend,
    Linter,
    MonorepoTool,
    ORMDatabase,
    PackageManager,
    TestingTool,
    UIComponents,
)
from create_march_app import backend as backend_module
from create_march_app import frontend as frontend_module
from create_march_app.backend import BackendSetup, nest_new_spec
from create_march_app.core.exceptions import CommandFailedError, PackageManagerError
from create_march_app.core.models import Services
from create_march_app.features import realtime, storybook
from create_march_app.features import testing as testing_feature
from create_march_app.frontend import FrontendSetup, UILibrarySetup, workspace_version
from create_march_app.linting import LintingSetup, eslint_config, eslint_packages
from create_march_app.monorepo import MonorepoSetup
from create_march_app.nx import get_required_plugins


def read_json(path):
    return json.loads(path.read_text())


def failing_on(marker):
    """Runner handler that fails any command containing ``marker``."""

    def handler(command):
        if marker in command:
            raise CommandFailedError(command, 1, stderr=f"{marker} exploded")
        return None

    return handler


class TestMonorepoSetup:
    """Tests for MonorepoSetup."""

    @pytest.mark.asyncio
    async def test_turbo_layout(self, make_context, services, fake_runner):
        """Test that Turborepo gets its config and workspace manifest."""
        ctx = make_context(monorepo_tool=MonorepoTool.TURBO)

        result = await MonorepoSetup(services).setup(ctx)

        assert result.success
        assert read_json(ctx.project_path / "turbo.json")["tasks"]["dev"]["persistent"] is True
        package = read_json(ctx.project_path / "package.json")
        assert package["workspaces"] == ["apps/*", "packages/*"]
        assert package["scripts"]["build"] == "turbo run build"
        assert (ctx.project_path / "apps").is_dir()
        assert (ctx.project_path / "packages").is_dir()
        assert fake_runner.calls == []

    @pytest.mark.asyncio
    async def test_plain_layout(self, make_context, services):
        """Test that monorepo 'none' only creates directories."""
        ctx = make_context()

        result = await MonorepoSetup(services).setup(ctx)

        assert result.success
        assert (ctx.project_path / "apps").is_dir()
        assert not (ctx.project_path / "package.json").exists()
        assert (ctx.project_path / ".gitignore").exists()

    @pytest.mark.asyncio
    async def test_nx_workspace(self, make_context, services, fake_runner):
        """Test the Nx bootstrap installs and library generators."""
        ctx = make_context(monorepo_tool=MonorepoTool.NX, ui_components=UIComponents.SHADCN)

        result = await MonorepoSetup(services).setup(ctx)

        assert result.success
        assert result.warnings == ()
        assert fake_runner.commands[0] == ["npm", "install", "-D", "nx@latest", "@nx/workspace@latest"]
        assert fake_runner.commands[1] == ["npm", "install", "-D", "typescript@latest", "@types/node@latest"]
        generators = [cmd[3] for cmd in fake_runner.commands if cmd[:3] == ["npx", "nx", "g"]]
        assert generators == ["@nx/react:library", "@nx/js:library"]
        assert read_json(ctx.project_path / "nx.json")["defaultBase"] == "main"
        assert (ctx.project_path / ".nxignore").exists()

    @pytest.mark.asyncio
    async def test_nx_generator_failure_falls_back(self, make_context, settings):
        """Test that failing library generators are replaced by manual libraries."""
        runner = FakeRunner(failing_on("g"))
        ctx = make_context(monorepo_tool=MonorepoTool.NX)

        result = await MonorepoSetup(Services.create(settings, runner)).setup(ctx)

        assert result.success
        assert len(result.warnings) == 1
        assert "scaffolded manually" in result.warnings[0]
        package = read_json(ctx.project_path / "libs" / "utils" / "package.json")
        assert package["name"] == "@workspace/utils"
        assert (ctx.project_path / "libs" / "utils" / "src" / "index.ts").exists()
        assert (ctx.project_path / ".nxignore").exists()

    @pytest.mark.asyncio
    async def test_optional_plugin_failure_is_warning(self, make_context, settings):
        """Test that an optional Nx plugin failure does not stop the setup."""
        runner = FakeRunner(failing_on("@nx/eslint@latest"))
        ctx = make_context(monorepo_tool=MonorepoTool.NX, linter=Linter.ESLINT_PRETTIER)

        result = await MonorepoSetup(Services.create(settings, runner)).setup(ctx)

        assert result.success
        assert any("@nx/eslint" in warning for warning in result.warnings)

    @pytest.mark.asyncio
    async def test_required_plugin_failure_propagates(self, make_context, settings):
        """Test that a required Nx plugin failure is raised."""
        runner = FakeRunner(failing_on("@nx/next@latest"))
        ctx = make_context(monorepo_tool=MonorepoTool.NX, frontend=Frontend.NEXTJS_APP)

        with pytest.raises(PackageManagerError):
            await MonorepoSetup(Services.create(settings, runner)).setup(ctx)


class TestNxPlugins:
    """Tests for get_required_plugins."""

    def test_plugins_follow_answers(self, make_context):
        """Test plugin selection and optional flags."""
        answers = make_context(
            frontend=Frontend.VITE,
            backend_api=BackendAPI.NESTJS,
            testing_tools=[TestingTool.JEST],
            linter=Linter.ESLINT_PRETTIER,
        ).answers

        plugins = {plugin.name: plugin.required for plugin in get_required_plugins(answers)}

        assert plugins == {
            "@nx/react": True,
            "@nx/vite": True,
            "@nx/nest": True,
            "@nx/jest": False,
            "@nx/eslint": False,
        }


class TestFrontendSetup:
    """Tests for FrontendSetup."""

    @pytest.mark.asyncio
    async def test_nextjs_app_router(self, make_context, services, fake_runner):
        """Test the app router template and its installs."""
        ctx = make_context(
            monorepo_tool=MonorepoTool.TURBO,
            frontend=Frontend.NEXTJS_APP,
            ui_components=UIComponents.TAILWIND_ONLY,
        )

        result = await FrontendSetup(services).setup(ctx)

        assert result.success
        app = ctx.app_path
        assert (app / "src" / "app" / "layout.tsx").exists()
        assert 'import "./globals.css";' in (app / "src" / "app" / "layout.tsx").read_text()
        assert (app / "src" / "app" / "globals.css").exists()
        assert (app / "postcss.config.mjs").exists()
        assert read_json(app / "package.json")["scripts"]["dev"] == "next dev --turbopack"
        assert fake_runner.commands[0] == ["npm", "install", "next", "react", "react-dom"]
        assert all(call["cwd"] == app for call in fake_runner.calls)

    @pytest.mark.asyncio
    async def test_nextjs_pages_router(self, make_context, services):
        """Test the pages router template."""
        ctx = make_context(frontend=Frontend.NEXTJS_PAGES)

        await FrontendSetup(services).setup(ctx)

        assert (ctx.app_path / "src" / "pages" / "_app.tsx").exists()
        assert (ctx.app_path / "src" / "pages" / "index.tsx").exists()
        assert not (ctx.app_path / "src" / "app").exists()
        assert not (ctx.app_path / "postcss.config.mjs").exists()

    @pytest.mark.asyncio
    async def test_vite_with_tailwind(self, make_context, services, fake_runner):
        """Test the Vite template and the Vite Tailwind plugin."""
        ctx = make_context(frontend=Frontend.VITE, ui_components=UIComponents.TAILWIND_ONLY)

        await FrontendSetup(services).setup(ctx)

        config = (ctx.app_path / "vite.config.ts").read_text()
        assert "tailwindcss()" in config
        assert (ctx.app_path / "index.html").exists()
        assert ["npm", "install", "-D", "tailwindcss", "@tailwindcss/vite"] in fake_runner.commands

    @pytest.mark.asyncio
    async def test_nx_uses_generator(self, make_context, services, fake_runner):
        """Test that Nx workspaces generate the app instead of writing templates."""
        ctx = make_context(monorepo_tool=MonorepoTool.NX, frontend=Frontend.NEXTJS_APP)

        await FrontendSetup(services).setup(ctx)

        command = fake_runner.commands[0]
        assert command[:5] == ["npx", "nx", "g", "@nx/next:app", "web"]
        assert "--directory=apps/web" in command
        assert "--appDir" in command
        assert fake_runner.calls[0]["env"] == {"NX_INTERACTIVE": "false"}

    @pytest.mark.asyncio
    async def test_astro_under_nx_warns(self, make_context, services):
        """Test that Astro in an Nx workspace comes from the template with a warning."""
        ctx = make_context(monorepo_tool=MonorepoTool.NX, frontend=Frontend.ASTRO)

        result = await FrontendSetup(services).setup(ctx)

        assert result.warnings
        assert (ctx.app_path / "astro.config.mjs").exists()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "package_manager,expected",
        [(PackageManager.NPM, "*"), (PackageManager.PNPM, "workspace:*"), (PackageManager.BUN, "workspace:*")],
    )
    async def test_shadcn_dependency(self, make_context, services, package_manager, expected):
        """Test the workspace specifier for the shared UI package."""
        ctx = make_context(
            frontend=Frontend.VITE,
            ui_components=UIComponents.SHADCN,
            package_manager=package_manager,
        )

        await FrontendSetup(services).setup(ctx)

        dependencies = read_json(ctx.app_path / "package.json")["dependencies"]
        assert dependencies["@workspace/ui"] == expected
        assert workspace_version(package_manager) == expected

    @pytest.mark.asyncio
    async def test_none_skips(self, make_context, services, fake_runner):
        result = await FrontendSetup(services).setup(make_context())
        assert result.success
        assert fake_runner.calls == []


class TestUILibrarySetup:
    """Tests for UILibrarySetup."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "tool,relative",
        [(MonorepoTool.TURBO, ("packages", "ui")), (MonorepoTool.NX, ("libs", "ui"))],
    )
    async def test_library_location(self, make_context, services, tool, relative):
        """Test where the shared library is written."""
        ctx = make_context(
            monorepo_tool=tool,
            frontend=Frontend.NEXTJS_APP,
            ui_components=UIComponents.SHADCN,
            base_color="zinc",
        )

        await UILibrarySetup(services).setup(ctx)

        lib = ctx.project_path.joinpath(*relative)
        components = read_json(lib / "components.json")
        assert components["tailwind"]["baseColor"] == "zinc"
        assert components["rsc"] is True
        assert read_json(lib / "package.json")["name"] == "@workspace/ui"
        assert (lib / "src" / "components" / "button.tsx").exists()

    @pytest.mark.asyncio
    async def test_skipped_without_shadcn(self, make_context, services):
        ctx = make_context(ui_components=UIComponents.TAILWIND_ONLY)
        result = await UILibrarySetup(services).setup(ctx)
        assert result.message == "shadcn/ui setup skipped"
        assert not ctx.packages_path.exists()


class TestBackendSetup:
    """Tests for BackendSetup."""

    @pytest.mark.asyncio
    async def test_trpc_with_prisma(self, make_context, services, fake_runner):
        """Test the tRPC app, Prisma files and database scripts."""
        ctx = make_context(backend_api=BackendAPI.TRPC, orm_database=ORMDatabase.PRISMA)

        result = await BackendSetup(services).setup(ctx)

        assert result.success
        assert any("prisma generate" in warning for warning in result.warnings)
        backend = ctx.backend_path
        assert "3001" in (backend / "src" / "index.ts").read_text()
        assert (backend / "prisma" / "schema.prisma").exists()
        scripts = read_json(backend / "package.json")["scripts"]
        assert scripts["db:push"] == "prisma db push"
        assert scripts["dev"] == "tsx watch src/index.ts"
        assert ["npm", "install", "-D", "prisma"] in fake_runner.commands

    @pytest.mark.asyncio
    async def test_apollo_with_drizzle_on_neon(self, make_context, services, fake_runner):
        """Test the Drizzle client for Neon."""
        ctx = make_context(
            backend_api=BackendAPI.GRAPHQL_APOLLO,
            orm_database=ORMDatabase.DRIZZLE,
            database_provider=DatabaseProvider.NEON,
        )

        result = await BackendSetup(services).setup(ctx)

        assert result.warnings == ()
        client = (ctx.backend_path / "src" / "db" / "index.ts").read_text()
        assert "drizzle-orm/neon-http" in client
        assert ["npm", "install", "drizzle-orm", "@neondatabase/serverless"] in fake_runner.commands
        assert (ctx.backend_path / "drizzle.config.ts").exists()

    @pytest.mark.asyncio
    async def test_nestjs_with_bun_uses_npm(self, make_context, services, fake_runner):
        """Test that the Nest CLI is told to use npm when bun was chosen."""
        ctx = make_context(backend_api=BackendAPI.NESTJS, package_manager=PackageManager.BUN)

        result = await BackendSetup(services).setup(ctx)

        command = fake_runner.commands[0]
        assert command[:4] == ["bunx", "@nestjs/cli@latest", "new", "api"]
        assert "--package-manager=npm" in command
        assert "--skip-install" in command
        assert fake_runner.calls[0]["cwd"] == ctx.apps_path
        assert len(result.warnings) == 1

    def test_nest_spec_keeps_other_managers(self):
        assert "--package-manager=pnpm" in nest_new_spec("api", PackageManager.PNPM).to_args()

    @pytest.mark.asyncio
    async def test_none_skips(self, make_context, services, fake_runner):
        result = await BackendSetup(services).setup(make_context())
        assert result.message == "Backend setup skipped"
        assert fake_runner.calls == []


class TestLintingSetup:
    """Tests for LintingSetup."""

    @pytest.mark.asyncio
    async def test_biome(self, make_context, services, fake_runner):
        """Test Biome config, scripts and install."""
        ctx = make_context(linter=Linter.BIOME, package_manager=PackageManager.PNPM)

        await LintingSetup(services).setup(ctx)

        assert read_json(ctx.project_path / "biome.json")["linter"]["enabled"] is True
        assert read_json(ctx.project_path / "package.json")["scripts"]["lint"] == "biome check ."
        assert fake_runner.commands == [["pnpm", "add", "-D", "@biomejs/biome"]]

    @pytest.mark.asyncio
    async def test_eslint_prettier(self, make_context, services, fake_runner):
        """Test ESLint flat config, Prettier files and lint-staged."""
        ctx = make_context(linter=Linter.ESLINT_PRETTIER, frontend=Frontend.NEXTJS_APP)

        await LintingSetup(services).setup(ctx)

        config = (ctx.project_path / "eslint.config.mjs").read_text()
        assert "@next/eslint-plugin-next" in config
        assert read_json(ctx.project_path / ".prettierrc")["printWidth"] == 100
        package = read_json(ctx.project_path / "package.json")
        assert "lint-staged" in package
        assert package["scripts"]["format"] == "prettier --write ."
        assert "@next/eslint-plugin-next" in fake_runner.commands[0]

    def test_eslint_without_react(self, make_context):
        """Test that non-React projects skip the React plugins."""
        answers = make_context(frontend=Frontend.ASTRO).answers
        assert "eslint-plugin-react" not in eslint_packages(answers)
        assert "react" not in eslint_config(answers)


TEMPLATES = [
    (frontend_module, "NEXT_APP_LAYOUT"),
    (frontend_module, "NEXT_APP_PAGE"),
    (frontend_module, "NEXT_PAGES_APP"),
    (frontend_module, "NEXT_PAGES_INDEX"),
    (frontend_module, "NEXT_CONFIG"),
    (frontend_module, "VITE_CONFIG"),
    (frontend_module, "VITE_INDEX_HTML"),
    (frontend_module, "VITE_APP"),
    (frontend_module, "ASTRO_CONFIG"),
    (frontend_module, "ASTRO_INDEX"),
    (backend_module, "TRPC_SERVER"),
    (backend_module, "APOLLO_SERVER"),
    (realtime, "LIVEBLOCKS_CONFIG"),
    (testing_feature, "JEST_CONFIG"),
    (storybook, "STORYBOOK_MAIN"),
]


def written_sources(root):
    if not root.exists():
        return []
    return [path for path in root.rglob("*") if path.is_file() and path.suffix in {".ts", ".tsx", ".astro", ".html"}]


class TestTemplates:
    """Tests that every formatted template renders."""

    @pytest.mark.parametrize(
        "module, name", [pytest.param(module, name, id=name) for module, name in TEMPLATES]
    )
    def test_template_renders(self, module, name):
        template = getattr(module, name)
        fields = {field for _, field, _, _ in Formatter().parse(template) if field}

        rendered = template.format(**{field: "value" for field in fields})

        assert "{{" not in rendered

    @pytest.mark.asyncio
    @pytest.mark.parametrize("choice", list(Frontend), ids=lambda member: member.value)
    async def test_every_frontend(self, make_context, services, choice):
        ctx = make_context(frontend=choice, ui_components=UIComponents.TAILWIND_ONLY)

        result = await FrontendSetup(services).setup(ctx)

        assert result.success
        for path in written_sources(ctx.project_path):
            assert "{{" not in path.read_text(), path
        if choice is not Frontend.NONE:
            assert written_sources(ctx.app_path)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("choice", list(BackendAPI), ids=lambda member: member.value)
    async def test_every_backend(self, make_context, services, choice):
        ctx = make_context(backend_api=choice)

        result = await BackendSetup(services).setup(ctx)

        assert result.success
        for path in written_sources(ctx.project_path):
            assert "{{" not in path.read_text(), path
        if choice in (BackendAPI.TRPC, BackendAPI.GRAPHQL_APOLLO):
            assert "3001" in (ctx.backend_path / "src" / "index.ts").read_text()
