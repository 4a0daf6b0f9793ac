"""Terminal output: the run spinner and the welcome, success and error panels."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.status import Status

from .answers import ORMDatabase, ProjectAnswers
from .project import run_script

BANNER = r"""
  __  __                 _
 |  \/  | __ _ _ __ ___| |__
 | |\/| |/ _` | '__/ __| '_ \
 | |  | | (_| | | | (__| | | |
 |_|  |_|\__,_|_|  \___|_| |_|
"""


class Spinner:
    """
    A restartable spinner over ``Console.status``.

    ``stop`` hides the spinner without printing anything so a child
    process can write to the terminal; ``start`` brings it back.
    """

    def __init__(self, text: str = "", console: Console | None = None):
        self.console = console or Console()
        self.text = text
        self._status: Status | None = None

    @property
    def active(self) -> bool:
        return self._status is not None

    def start(self, text: str | None = None) -> None:
        if text is not None:
            self.text = text
        if self._status is None:
            self._status = self.console.status(self.text, spinner="dots")
            self._status.start()
        else:
            self._status.update(self.text)

    def update(self, text: str) -> None:
        self.text = text
        if self._status is not None:
            self._status.update(text)

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None

    def succeed(self, text: str | None = None) -> None:
        self.stop()
        self.console.print(f"[green]✔[/green] {text or self.text}")

    def fail(self, text: str | None = None) -> None:
        self.stop()
        self.console.print(f"[red]✖[/red] {text or self.text}")


def show_welcome(console: Console) -> None:
    console.print(f"[bold cyan]{BANNER}[/bold cyan]")
    console.print(
        Panel(
            "Scaffold a production-ready TypeScript monorepo.\n"
            "Answer a few questions and the project is generated for you.",
            title="create-march-app",
            border_style="cyan",
            padding=(1, 2),
        )
    )


def next_steps(answers: ProjectAnswers, directory: str) -> list[str]:
    pm = answers.package_manager
    steps = [
        f"1. [cyan]cd {directory}[/cyan]",
        "2. Copy [cyan].env.example[/cyan] to [cyan].env[/cyan] and fill in your values",
        f"3. [cyan]{run_script(pm, 'dev')}[/cyan] to start development",
    ]
    if answers.orm_database is not ORMDatabase.NONE:
        steps.append(f"4. [cyan]{run_script(pm, 'db:push')}[/cyan] in the API app to sync the database schema")
    return steps


def show_success(
    console: Console,
    answers: ProjectAnswers,
    directory: str,
    warnings: Sequence[str] = (),
) -> None:
    console.print()
    console.print(
        Panel(
            f"[bold green]{answers.project_name}[/bold green] is ready!",
            title="Project Created",
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print(
        Panel("\n".join(next_steps(answers, directory)), title="Next Steps", border_style="cyan", padding=(1, 2))
    )
    if warnings:
        console.print(
            Panel(
                "\n".join(f"• {warning}" for warning in warnings),
                title="Warnings",
                border_style="yellow",
                padding=(1, 2),
            )
        )


def show_error(console: Console, message: str) -> None:
    console.print()
    console.print(Panel(message, title="Setup Failed", border_style="red"))
