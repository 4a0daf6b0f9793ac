"""
Feature Selection Engine
========================

Optional feature installers gated by the answers.

The table order is the execution order. Each installer receives the
execution context and the run's services; any failure is re-raised as a
FeatureError naming the feature.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable

from ..answers import (
    Authentication,
    BackendAPI,
    CICDTool,
    DeveloperExperienceTool,
    Payments,
    ProjectAnswers,
    RealtimeCollaboration,
    UITools,
)
from ..core.exceptions import FeatureError
from ..core.logging import Timer, log_context
from ..core.models import ExecutionContext, Services
from .auth import setup_auth
from .cicd import setup_github_actions
from .docker import setup_docker
from .env import setup_api_connection
from .git_hooks import setup_commitlint, setup_husky
from .payments import setup_stripe
from .pwa import setup_pwa
from .realtime import setup_realtime_collaboration
from .storybook import setup_ui_tools
from .testing import setup_testing

FeatureAction = Callable[[ExecutionContext, Services], Awaitable[None]]
Progress = Callable[[str], None]


@dataclass(frozen=True)
class FeatureDescriptor:
    name: str
    label: str
    condition: Callable[[ProjectAnswers], bool]
    action: FeatureAction


def build_feature_table() -> list[FeatureDescriptor]:
    return [
        FeatureDescriptor(
            "Authentication",
            "🔐 Setting up authentication...",
            lambda a: a.authentication is not Authentication.NONE,
            setup_auth,
        ),
        FeatureDescriptor(
            "API connection",
            "🌐 Setting up API connection...",
            lambda a: a.backend_api is not BackendAPI.NONE,
            setup_api_connection,
        ),
        FeatureDescriptor(
            "Stripe integration",
            "💳 Setting up Stripe integration...",
            lambda a: a.payments is Payments.STRIPE,
            setup_stripe,
        ),
        FeatureDescriptor(
            "Testing tools",
            "🧪 Setting up testing tools...",
            lambda a: len(a.testing_tools) > 0,
            setup_testing,
        ),
        FeatureDescriptor(
            "UI development tools",
            "📚 Setting up UI development tools...",
            lambda a: a.ui_tools is not UITools.NONE,
            setup_ui_tools,
        ),
        FeatureDescriptor(
            "Progressive Web App",
            "📱 Setting up Progressive Web App (PWA)...",
            lambda a: a.progressive_web_app,
            setup_pwa,
        ),
        FeatureDescriptor(
            "Realtime collaboration",
            "🔄 Setting up realtime collaboration...",
            lambda a: a.realtime_collaboration is not RealtimeCollaboration.NONE,
            setup_realtime_collaboration,
        ),
        FeatureDescriptor(
            "Docker configuration",
            "🐳 Setting up Docker configuration...",
            lambda a: CICDTool.DOCKER in a.cicd_devops,
            setup_docker,
        ),
        FeatureDescriptor(
            "GitHub Actions",
            "⚙️  Setting up GitHub Actions...",
            lambda a: CICDTool.GITHUB_ACTIONS in a.cicd_devops,
            setup_github_actions,
        ),
        FeatureDescriptor(
            "Husky",
            "🐕 Setting up Husky...",
            lambda a: DeveloperExperienceTool.HUSKY in a.developer_experience,
            setup_husky,
        ),
        FeatureDescriptor(
            "Commitlint",
            "📋 Setting up Commitlint...",
            lambda a: DeveloperExperienceTool.COMMITLINT in a.developer_experience,
            setup_commitlint,
        ),
    ]


def selected_features(answers: ProjectAnswers, table: list[FeatureDescriptor] | None = None) -> list[FeatureDescriptor]:
    if table is None:
        table = build_feature_table()
    return [feature for feature in table if feature.condition(answers)]


async def run_features(
    ctx: ExecutionContext,
    services: Services,
    table: list[FeatureDescriptor] | None = None,
    progress: Progress | None = None,
) -> list[str]:
    """
    Run every selected feature in table order.

    Returns:
        Names of the features that ran

    Raises:
        FeatureError: For the first feature that fails
    """
    completed: list[str] = []
    for feature in selected_features(ctx.answers, table):
        if progress is not None:
            progress(feature.label)
        with log_context(feature=feature.name), Timer(feature.name) as timer:
            try:
                await feature.action(ctx, services)
            except Exception as e:
                raise FeatureError(feature.name, str(e) or type(e).__name__, e) from e
        ctx.logger.debug("Feature finished: %s", feature.name, extra={"duration_ms": timer.duration_ms})
        completed.append(feature.name)
    return completed
