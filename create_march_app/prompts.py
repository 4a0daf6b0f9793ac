"""
Interactive Prompts
===================

Asks the project questions in order and builds the answer set.

Questions are declared as data; a question whose ``when`` predicate is
false is skipped and its field keeps the ProjectAnswers default.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .answers import (
    Authentication,
    BackendAPI,
    CICDTool,
    DatabaseProvider,
    DeveloperExperienceTool,
    Frontend,
    Linter,
    MonorepoTool,
    ORMDatabase,
    PackageManager,
    Payments,
    ProjectAnswers,
    RealtimeCollaboration,
    TestingTool,
    UIComponents,
    UITools,
    enum_values,
)
from .conflict import ConflictAction
from .validation import validate_project_name

DEFAULT_PROJECT_NAME = "my-march-saas"
BASE_COLORS = ["slate", "gray", "zinc", "neutral", "stone"]

Answers = dict[str, Any]


def _has_frontend(answers: Answers) -> bool:
    return answers.get("frontend") != Frontend.NONE.value


@dataclass(frozen=True)
class Question:
    field: str
    message: str
    choices: list[str]
    default: str | list[str]
    multiple: bool = False
    when: Callable[[Answers], bool] | None = None


def _enum_question(
    field: str,
    message: str,
    enum_type: type[Enum],
    default: Enum,
    when: Callable[[Answers], bool] | None = None,
) -> Question:
    return Question(field, message, enum_values(enum_type), default.value, when=when)


def _multi_question(
    field: str,
    message: str,
    enum_type: type[Enum],
    default: list[Enum],
    when: Callable[[Answers], bool] | None = None,
) -> Question:
    return Question(
        field,
        message,
        [*enum_values(enum_type), "none"],
        [member.value for member in default],
        multiple=True,
        when=when,
    )


QUESTIONS: list[Question] = [
    _enum_question("package_manager", "📦 Choose your package manager", PackageManager, PackageManager.BUN),
    _enum_question("monorepo_tool", "🏗️  Choose your monorepo tool", MonorepoTool, MonorepoTool.TURBO),
    _enum_question("frontend", "⚛️  Choose your frontend framework", Frontend, Frontend.NEXTJS_APP),
    _enum_question(
        "backend_api", "🔌 Choose your backend / API layer", BackendAPI, BackendAPI.TRPC, when=_has_frontend
    ),
    _enum_question(
        "ui_components", "🧩 Choose your UI components", UIComponents, UIComponents.SHADCN, when=_has_frontend
    ),
    Question(
        "base_color",
        "🎨 Choose a base color for shadcn/ui",
        BASE_COLORS,
        "slate",
        when=lambda a: a.get("ui_components") == UIComponents.SHADCN.value,
    ),
    _enum_question(
        "orm_database",
        "🗄️  Choose your ORM / Database layer",
        ORMDatabase,
        ORMDatabase.PRISMA,
        when=lambda a: a.get("backend_api", BackendAPI.NONE.value) != BackendAPI.NONE.value,
    ),
    _enum_question(
        "database_provider",
        "🌐 Choose your database provider",
        DatabaseProvider,
        DatabaseProvider.SUPABASE,
        when=lambda a: a.get("orm_database", ORMDatabase.NONE.value) != ORMDatabase.NONE.value,
    ),
    _enum_question("authentication", "🔐 Choose your authentication", Authentication, Authentication.NEXTAUTH),
    _enum_question("payments", "💳 Choose your payments", Payments, Payments.STRIPE),
    _multi_question(
        "testing_tools", "🧪 Select testing tools", TestingTool, [TestingTool.JEST], when=_has_frontend
    ),
    _multi_question("cicd_devops", "🔄 Select CI/CD & DevOps tools", CICDTool, [CICDTool.GITHUB_ACTIONS]),
    _enum_question("linter", "🎨 Choose your code quality tools", Linter, Linter.BIOME),
    _multi_question(
        "developer_experience",
        "🛠️  Select developer experience tools",
        DeveloperExperienceTool,
        [DeveloperExperienceTool.HUSKY],
    ),
    _enum_question("ui_tools", "📚 Choose UI development tools", UITools, UITools.NONE, when=_has_frontend),
    _enum_question(
        "realtime_collaboration",
        "🔄 Choose realtime / collaboration features",
        RealtimeCollaboration,
        RealtimeCollaboration.NONE,
    ),
]


def parse_selection(raw: str, choices: list[str]) -> list[str] | None:
    """Parse a comma separated multi-select; None when any item is unknown."""
    items = [item.strip().lower() for item in raw.split(",") if item.strip()]
    if any(item not in choices for item in items):
        return None
    return [item for item in items if item != "none"]


def ask_project_name(console: Console, default: str = DEFAULT_PROJECT_NAME) -> str:
    while True:
        name = Prompt.ask("What's your project name?", default=default, console=console).strip()
        result = validate_project_name(name)
        if result:
            return name
        console.print(f"[red]{result.message}[/red]")


def _ask(console: Console, question: Question, default: str | list[str]) -> Any:
    if not question.multiple:
        return Prompt.ask(question.message, choices=question.choices, default=default, console=console)

    hint = ", ".join(question.choices)
    shown = ", ".join(default) or "none"
    while True:
        raw = Prompt.ask(f"{question.message} [dim](comma separated: {hint})[/dim]", default=shown, console=console)
        selected = parse_selection(raw, question.choices)
        if selected is not None:
            return selected
        console.print(f"[red]Please choose from: {hint}[/red]")


def prompt_answers(
    console: Console | None = None,
    project_name: str | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> ProjectAnswers:
    """
    Run the full question sequence and return the answer set.

    ``defaults`` replaces the preselected choice of a question by field name.
    """
    console = console or Console()
    defaults = defaults or {}
    answers: Answers = {"project_name": project_name or ask_project_name(console)}

    for question in QUESTIONS:
        if question.when is not None and not question.when(answers):
            continue
        answers[question.field] = _ask(console, question, defaults.get(question.field, question.default))

    if _has_frontend(answers):
        answers["progressive_web_app"] = Confirm.ask(
            "📱 Enable Progressive Web App (PWA) support?", default=False, console=console
        )
    return ProjectAnswers.from_dict(answers)


def prompt_conflict_action(project_name: str, console: Console | None = None) -> ConflictAction:
    console = console or Console()
    console.print(
        f"[yellow]Directory '{project_name}' already exists.[/yellow]\n"
        "  cancel   - choose a different name\n"
        "  remove   - remove the existing directory and continue\n"
        "  continue - use the existing directory (risky)"
    )
    choice = Prompt.ask(
        "What would you like to do?",
        choices=[action.value for action in ConflictAction],
        default=ConflictAction.CANCEL.value,
        console=console,
    )
    return ConflictAction(choice)


def prompt_cleanup(console: Console | None = None) -> bool:
    return Confirm.ask(
        "Would you like to remove the partially created project?",
        default=True,
        console=console or Console(),
    )
