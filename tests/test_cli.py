"""Tests for the command line entry point."""

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
import yaml

from create_march_app import __version__
from create_march_app.cli import build_parser, main
from create_march_app.conflict import ConflictAction


@pytest.fixture
def answers_file(tmp_path):
    path = tmp_path / "answers.yaml"
    path.write_text(yaml.safe_dump({"project_name": "from-file", "package_manager": "pnpm"}))
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.answers is None
        assert args.conflict is None
        assert args.cleanup is None
        assert args.verbose is False
        assert args.directory == Path.cwd()

    def test_cleanup_flags(self):
        """Test the mutually exclusive rollback flags."""
        parser = build_parser()
        assert parser.parse_args(["--yes-cleanup"]).cleanup is True
        assert parser.parse_args(["--no-cleanup"]).cleanup is False
        with pytest.raises(SystemExit):
            parser.parse_args(["--yes-cleanup", "--no-cleanup"])

    def test_conflict_choices(self):
        assert build_parser().parse_args(["--conflict", "remove"]).conflict == "remove"
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--conflict", "overwrite"])

    def test_version(self, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--version"])
        assert __version__ in capsys.readouterr().out


class TestMain:
    """Tests for main()."""

    def test_answers_file_run(self, answers_file, tmp_path, monkeypatch):
        """Test that --answers skips prompts and hands options to the orchestrator."""
        monkeypatch.chdir(tmp_path)
        with patch("create_march_app.cli.SetupOrchestrator") as orchestrator_cls, patch(
            "create_march_app.cli.prompt_answers"
        ) as prompt:
            orchestrator_cls.return_value.run = AsyncMock(return_value=0)
            code = main(
                [
                    "--answers",
                    str(answers_file),
                    "--name",
                    "cli-name",
                    "--directory",
                    str(tmp_path),
                    "--conflict",
                    "remove",
                    "--no-cleanup",
                ]
            )

        assert code == 0
        prompt.assert_not_called()
        answers = orchestrator_cls.call_args.args[0]
        kwargs = orchestrator_cls.call_args.kwargs
        assert answers.project_name == "cli-name"
        assert answers.package_manager.value == "pnpm"
        assert kwargs["target_dir"] == tmp_path
        assert kwargs["conflict_action"] is ConflictAction.REMOVE
        assert kwargs["cleanup"] is False

    def test_failed_run_exit_code(self, answers_file, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with patch("create_march_app.cli.SetupOrchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(return_value=1)
            assert main(["--answers", str(answers_file)]) == 1

    def test_invalid_answers_file(self, tmp_path, monkeypatch):
        """Test that a bad answers file exits 1 without running setup."""
        monkeypatch.chdir(tmp_path)
        bad = tmp_path / "answers.yaml"
        bad.write_text("project_name: x\nframework: vue\n")

        with patch("create_march_app.cli.SetupOrchestrator") as orchestrator_cls:
            assert main(["--answers", str(bad)]) == 1
        orchestrator_cls.assert_not_called()

    def test_missing_answers_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert main(["--answers", str(tmp_path / "missing.yaml")]) == 1

    def test_interrupted_prompts_exit_zero(self, tmp_path, monkeypatch):
        """Test that Ctrl+C during the questions is a clean cancel."""
        monkeypatch.chdir(tmp_path)
        with patch("create_march_app.cli.show_welcome"), patch(
            "create_march_app.cli.prompt_answers", side_effect=KeyboardInterrupt
        ), patch("create_march_app.cli.SetupOrchestrator") as orchestrator_cls:
            assert main([]) == 0
        orchestrator_cls.assert_not_called()

    def test_env_file_settings(self, answers_file, tmp_path, monkeypatch):
        """Test that a .env in the working directory reaches the settings."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MARCH_APP_DIR_NAME", "unset")
        monkeypatch.delenv("MARCH_APP_DIR_NAME")
        (tmp_path / ".env").write_text("MARCH_APP_DIR_NAME=site\n")

        with patch("create_march_app.cli.SetupOrchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(return_value=0)
            main(["--answers", str(answers_file)])

        assert orchestrator_cls.call_args.args[1].app_dir_name == "site"

    def test_default_package_manager_fills_gaps(self, tmp_path, monkeypatch):
        """Test that the configured package manager applies only when the file omits one."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MARCH_DEFAULT_PACKAGE_MANAGER", "yarn")
        bare = tmp_path / "bare.yaml"
        bare.write_text("project_name: bare-app\n")
        pinned = tmp_path / "pinned.yaml"
        pinned.write_text("project_name: pinned-app\npackage_manager: npm\n")

        with patch("create_march_app.cli.SetupOrchestrator") as orchestrator_cls:
            orchestrator_cls.return_value.run = AsyncMock(return_value=0)
            main(["--answers", str(bare)])
            assert orchestrator_cls.call_args.args[0].package_manager.value == "yarn"
            main(["--answers", str(pinned)])
            assert orchestrator_cls.call_args.args[0].package_manager.value == "npm"

    def test_default_package_manager_preselects_prompt(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MARCH_DEFAULT_PACKAGE_MANAGER", "pnpm")

        with patch("create_march_app.cli.show_welcome"), patch(
            "create_march_app.cli.prompt_answers", side_effect=KeyboardInterrupt
        ) as prompt:
            main([])

        assert prompt.call_args.kwargs["defaults"] == {"package_manager": "pnpm"}
