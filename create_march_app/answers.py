"""
Project Answers
===============

The immutable answer set describing the stack to scaffold.

Every single-choice answer is an Enum with an explicit ``NONE`` member where
skipping is allowed; every multi-select answer is a tuple of Enum members.
A ``"none"`` entry in a multi-select is dropped on construction, so an empty
tuple is the only way a list says "skip".
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Mapping, TypeVar

import yaml

from .core.exceptions import InvalidAnswersError

E = TypeVar("E", bound=Enum)


class PackageManager(str, Enum):
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"


class MonorepoTool(str, Enum):
    TURBO = "turbo"
    NX = "nx"
    NONE = "none"


class Frontend(str, Enum):
    NEXTJS_APP = "nextjs-app"
    NEXTJS_PAGES = "nextjs-pages"
    VITE = "vite"
    ASTRO = "astro"
    NONE = "none"


class BackendAPI(str, Enum):
    TRPC = "trpc"
    NESTJS = "nestjs"
    GRAPHQL_APOLLO = "graphql-apollo"
    NONE = "none"


class UIComponents(str, Enum):
    SHADCN = "shadcn"
    TAILWIND_ONLY = "tailwind-only"
    NONE = "none"


class ORMDatabase(str, Enum):
    PRISMA = "prisma"
    DRIZZLE = "drizzle"
    NONE = "none"


class DatabaseProvider(str, Enum):
    NEON = "neon"
    SUPABASE = "supabase"
    NONE = "none"


class Authentication(str, Enum):
    NEXTAUTH = "nextauth"
    NONE = "none"


class Payments(str, Enum):
    STRIPE = "stripe"
    NONE = "none"


class Linter(str, Enum):
    ESLINT_PRETTIER = "eslint-prettier"
    BIOME = "biome"
    NONE = "none"


class UITools(str, Enum):
    STORYBOOK = "storybook"
    NONE = "none"


class RealtimeCollaboration(str, Enum):
    LIVEBLOCKS = "liveblocks"
    NONE = "none"


class TestingTool(str, Enum):
    JEST = "jest"


class CICDTool(str, Enum):
    GITHUB_ACTIONS = "github-actions"
    DOCKER = "docker"


class DeveloperExperienceTool(str, Enum):
    HUSKY = "husky"
    COMMITLINT = "commitlint"


def _coerce(enum_type: type[E], value: Any, field_name: str) -> E:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise InvalidAnswersError(
            f"Invalid value {value!r} for '{field_name}' (expected one of: {allowed})"
        ) from None


def _coerce_list(enum_type: type[E], values: Any, field_name: str) -> tuple[E, ...]:
    if values is None:
        return ()
    if isinstance(values, (str, Enum)):
        values = [values]
    selected: list[E] = []
    for value in values:
        raw = value.value if isinstance(value, Enum) else str(value).strip().lower()
        if raw in ("", "none"):
            continue
        member = _coerce(enum_type, raw, field_name)
        if member not in selected:
            selected.append(member)
    return tuple(selected)


@dataclass(frozen=True)
class ProjectAnswers:
    """Every decision the user made; read-only for the rest of the run."""

    project_name: str
    package_manager: PackageManager = PackageManager.NPM
    monorepo_tool: MonorepoTool = MonorepoTool.NONE
    frontend: Frontend = Frontend.NONE
    backend_api: BackendAPI = BackendAPI.NONE
    ui_components: UIComponents = UIComponents.NONE
    orm_database: ORMDatabase = ORMDatabase.NONE
    database_provider: DatabaseProvider = DatabaseProvider.NONE
    authentication: Authentication = Authentication.NONE
    payments: Payments = Payments.NONE
    testing_tools: tuple[TestingTool, ...] = ()
    cicd_devops: tuple[CICDTool, ...] = ()
    linter: Linter = Linter.NONE
    developer_experience: tuple[DeveloperExperienceTool, ...] = ()
    ui_tools: UITools = UITools.NONE
    progressive_web_app: bool = False
    realtime_collaboration: RealtimeCollaboration = RealtimeCollaboration.NONE
    base_color: str = "slate"

    def __post_init__(self) -> None:
        # Normalise loose inputs so direct construction behaves like from_dict
        for f in fields(self):
            enum_type = _ENUM_FIELDS.get(f.name)
            if enum_type is not None:
                object.__setattr__(self, f.name, _coerce(enum_type, getattr(self, f.name), f.name))
            list_type = _LIST_FIELDS.get(f.name)
            if list_type is not None:
                object.__setattr__(self, f.name, _coerce_list(list_type, getattr(self, f.name), f.name))
        object.__setattr__(self, "progressive_web_app", bool(self.progressive_web_app))

    # Derived flags used by the setup services

    @property
    def use_tailwind(self) -> bool:
        return self.ui_components in (UIComponents.SHADCN, UIComponents.TAILWIND_ONLY)

    @property
    def use_shadcn(self) -> bool:
        return self.ui_components is UIComponents.SHADCN

    @property
    def use_trpc(self) -> bool:
        return self.backend_api is BackendAPI.TRPC

    @property
    def is_nextjs(self) -> bool:
        return self.frontend in (Frontend.NEXTJS_APP, Frontend.NEXTJS_PAGES)

    @property
    def is_react(self) -> bool:
        return self.is_nextjs or self.frontend is Frontend.VITE

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProjectAnswers":
        """Build answers from a plain mapping (answers file or prompt output)."""
        known = {f.name for f in fields(cls)}
        normalised = {str(key).replace("-", "_"): value for key, value in data.items()}
        unknown = sorted(set(normalised) - known)
        if unknown:
            raise InvalidAnswersError(f"Unknown answer keys: {', '.join(unknown)}")
        if not normalised.get("project_name"):
            raise InvalidAnswersError("Answers must include 'project_name'")
        return cls(**normalised)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = [item.value for item in value]
            result[f.name] = value
        return result


_ENUM_FIELDS: dict[str, type[Enum]] = {
    "package_manager": PackageManager,
    "monorepo_tool": MonorepoTool,
    "frontend": Frontend,
    "backend_api": BackendAPI,
    "ui_components": UIComponents,
    "orm_database": ORMDatabase,
    "database_provider": DatabaseProvider,
    "authentication": Authentication,
    "payments": Payments,
    "linter": Linter,
    "ui_tools": UITools,
    "realtime_collaboration": RealtimeCollaboration,
}

_LIST_FIELDS: dict[str, type[Enum]] = {
    "testing_tools": TestingTool,
    "cicd_devops": CICDTool,
    "developer_experience": DeveloperExperienceTool,
}


def load_answers_file(
    path: Path | str,
    overrides: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> ProjectAnswers:
    """
    Load answers from a YAML or JSON file.

    Args:
        path: Answers file; ``.json`` is parsed as JSON, anything else as YAML
        overrides: Values that replace entries from the file (e.g. --name)
        defaults: Values used for keys the file leaves out

    Raises:
        InvalidAnswersError: If the file is missing, malformed or has bad values
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InvalidAnswersError(f"Cannot read answers file {path}: {e}") from e

    try:
        data = json.loads(text) if path.suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidAnswersError(f"Cannot parse answers file {path}: {e}") from e

    if not isinstance(data, dict):
        raise InvalidAnswersError(f"Answers file {path} must contain a mapping")

    if defaults:
        data = {**defaults, **data}
    if overrides:
        data.update({key: value for key, value in overrides.items() if value is not None})
    return ProjectAnswers.from_dict(data)


def enum_values(enum_type: type[Enum], exclude: Iterable[Enum] = ()) -> list[str]:
    excluded = set(exclude)
    return [member.value for member in enum_type if member not in excluded]
