"""UI development tools (Storybook)."""

from __future__ import annotations

import logging
from typing import assert_never

from ..answers import Frontend, ProjectAnswers, UITools
from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services

logger = logging.getLogger(__name__)

STORYBOOK_MAIN = """\
import type {{ StorybookConfig }} from "{framework}";

const config: StorybookConfig = {{
  stories: ["../src/**/*.mdx", "../src/**/*.stories.@(js|jsx|ts|tsx)"],
  addons: ["@storybook/addon-essentials"],
  framework: {{ name: "{framework}", options: {{}} }},
}};

export default config;
"""

STORYBOOK_PREVIEW = """\
import type { Preview } from "@storybook/react";

const preview: Preview = {
  parameters: {
    controls: { matchers: { color: /(background|color)$/i, date: /Date$/i } },
  },
};

export default preview;
"""

EXAMPLE_STORY = """\
import type { Meta, StoryObj } from "@storybook/react";

function Greeting({ name }: { name: string }) {
  return <p>Hello {name}</p>;
}

const meta: Meta<typeof Greeting> = {
  title: "Example/Greeting",
  component: Greeting,
};

export default meta;

export const Default: StoryObj<typeof Greeting> = { args: { name: "World" } };
"""


def storybook_framework(answers: ProjectAnswers) -> str:
    if answers.is_nextjs:
        return "@storybook/nextjs"
    if answers.frontend is Frontend.VITE:
        return "@storybook/react-vite"
    return "@storybook/react-webpack5"


async def setup_storybook(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up Storybook...")
    fs = services.fs
    app = ctx.app_path
    framework = storybook_framework(ctx.answers)

    await services.install(
        ctx,
        ["storybook", framework, "@storybook/react", "@storybook/addon-essentials"],
        app,
        dev=True,
    )
    await fs.write_file(app / ".storybook" / "main.ts", STORYBOOK_MAIN.format(framework=framework))
    await fs.write_file(app / ".storybook" / "preview.ts", STORYBOOK_PREVIEW)
    await fs.write_file(app / "src" / "stories" / "Greeting.stories.tsx", EXAMPLE_STORY)

    package_path = app / "package.json"
    if await fs.file_exists(package_path):
        await fs.update_json_file(
            package_path,
            {"scripts": {"storybook": "storybook dev -p 6006", "build-storybook": "storybook build"}},
        )
    log_success(logger, "Storybook setup completed")


async def setup_ui_tools(ctx: ExecutionContext, services: Services) -> None:
    tool = ctx.answers.ui_tools
    match tool:
        case UITools.STORYBOOK:
            await setup_storybook(ctx, services)
        case UITools.NONE:
            logger.info("Skipping UI tools setup")
        case _:
            assert_never(tool)
