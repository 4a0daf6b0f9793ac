"""Tests for project.py: root artifacts, git, install, commit and cleanup."""

import json

import pytest

from conftest import FakeRunner
from create_march_app.answers import (
    Linter,
    MonorepoTool,
    ORMDatabase,
    PackageManager,
    Payments,
    ProjectAnswers,
)
from create_march_app.core.exceptions import FileSystemError
from create_march_app.core.filesystem import FileSystemService
from create_march_app.core.models import Services
from create_march_app.project import (
    WRITE_TEST_FILE,
    build_root_package_json,
    cleanup_project,
    create_configuration_files,
    create_env_example,
    create_initial_commit,
    initialize_git_repository,
    initialize_project,
    install_dependencies,
)


class TestRootPackageJson:
    """Tests for build_root_package_json."""

    @pytest.mark.parametrize("tool", [MonorepoTool.TURBO, MonorepoTool.NX])
    def test_workspace_tools_declare_workspaces(self, tool):
        """Test that turbo and nx layouts declare workspaces."""
        package = build_root_package_json("demo", ProjectAnswers(project_name="demo", monorepo_tool=tool))
        assert package["workspaces"] == ["apps/*", "packages/*"]
        assert tool.value in package["devDependencies"]

    def test_plain_layout_has_no_workspaces(self):
        """Test that monorepo 'none' omits the workspaces key."""
        package = build_root_package_json("demo", ProjectAnswers(project_name="demo"))
        assert "workspaces" not in package
        assert package["private"] is True
        assert package["devDependencies"]["typescript"] == "^5.3.3"

    def test_format_script_follows_linter(self):
        """Test the format script for biome and prettier."""
        biome = build_root_package_json("demo", ProjectAnswers(project_name="demo", linter=Linter.BIOME))
        eslint = build_root_package_json("demo", ProjectAnswers(project_name="demo", linter=Linter.ESLINT_PRETTIER))
        assert biome["scripts"]["format"].startswith("biome")
        assert eslint["scripts"]["format"].startswith("prettier")


class TestEnvExample:
    """Tests for the root .env.example."""

    def test_database_and_stripe_sections(self):
        """Test that selected integrations add their variables."""
        content = create_env_example(
            ProjectAnswers(project_name="demo", orm_database=ORMDatabase.PRISMA, payments=Payments.STRIPE)
        )
        assert "DATABASE_URL" in content
        assert "STRIPE_SECRET_KEY" in content


class TestLifecycle:
    """Tests for the lifecycle steps."""

    @pytest.mark.asyncio
    async def test_initialize_project_removes_sentinel(self, make_context, services):
        """Test that the write check leaves no sentinel behind."""
        ctx = make_context()
        await initialize_project(ctx, services)

        assert ctx.project_path.is_dir()
        assert not (ctx.project_path / WRITE_TEST_FILE).exists()

    @pytest.mark.asyncio
    async def test_initialize_project_unwritable(self, make_context, services):
        """Test that an uncreatable directory reports a permission problem."""
        ctx = make_context()
        ctx.project_path.parent.mkdir(parents=True, exist_ok=True)
        ctx.project_path.write_text("a file, not a directory")

        with pytest.raises(FileSystemError, match="Cannot create project directory"):
            await initialize_project(ctx, services)

    @pytest.mark.asyncio
    async def test_git_init_sets_main(self, make_context, services, fake_runner):
        """Test the git commands and the ignore file."""
        ctx = make_context()
        ctx.project_path.mkdir(parents=True)

        await initialize_git_repository(ctx, services)

        assert fake_runner.commands == [
            ["git", "init", "--quiet"],
            ["git", "symbolic-ref", "HEAD", "refs/heads/main"],
        ]
        assert all(call["cwd"] == ctx.project_path for call in fake_runner.calls)
        assert "node_modules/" in (ctx.project_path / ".gitignore").read_text()

    @pytest.mark.asyncio
    async def test_configuration_files_merge_existing(self, make_context, services):
        """Test that earlier manifest and env entries survive."""
        ctx = make_context(monorepo_tool=MonorepoTool.TURBO)
        ctx.project_path.mkdir(parents=True)
        (ctx.project_path / "package.json").write_text(
            json.dumps({"name": "demo-app", "scripts": {"prepare": "husky", "dev": "old"}, "lint-staged": {}})
        )
        (ctx.project_path / ".env.example").write_text("# Feature\nFEATURE_KEY=1\n")

        result = await create_configuration_files(ctx, services)

        assert result.success
        package = json.loads((ctx.project_path / "package.json").read_text())
        assert package["scripts"]["prepare"] == "husky"
        assert package["scripts"]["dev"] == "turbo dev"
        assert "lint-staged" in package
        env = (ctx.project_path / ".env.example").read_text()
        assert env.endswith("FEATURE_KEY=1\n")
        assert (ctx.project_path / "README.md").exists()

    @pytest.mark.asyncio
    async def test_install_and_commit(self, make_context, services, fake_runner):
        """Test the root install and commit commands."""
        ctx = make_context(package_manager=PackageManager.YARN)

        await install_dependencies(ctx, services)
        await create_initial_commit(ctx, services)

        assert fake_runner.commands == [
            ["yarn", "install"],
            ["git", "add", "."],
            ["git", "commit", "--quiet", "-m", "Initial commit"],
        ]
        assert fake_runner.calls[0]["timeout"] == ctx.settings.install_timeout

    @pytest.mark.asyncio
    async def test_cleanup(self, tmp_path):
        """Test that cleanup removes the directory and tolerates absence."""
        project = tmp_path / "demo"
        (project / "apps").mkdir(parents=True)

        await cleanup_project(project, FileSystemService())
        await cleanup_project(project)

        assert not project.exists()


@pytest.mark.asyncio
async def test_services_execute_prefix(make_context, settings):
    """Test that generator runs are prefixed with the exec command."""
    runner = FakeRunner()
    services = Services.create(settings, runner)
    ctx = make_context(package_manager=PackageManager.PNPM)

    await services.execute(ctx, ["create-thing", "x"], ctx.project_path)

    assert runner.commands == [["pnpm", "dlx", "create-thing", "x"]]
    assert runner.calls[0]["timeout"] == settings.generator_timeout
