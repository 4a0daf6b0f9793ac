"""
Stage Pipeline
==============

Runs the ordered setup stages of a scaffolding run.

Each stage is a zero-argument coroutine factory gated by a predicate over
the answers. A stage that raises, or that returns a failed SetupResult,
becomes a single StageError carrying the original message. OPTIONAL stages
record that error as a warning and the run continues.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, Sequence

from .answers import ProjectAnswers
from .core.exceptions import SetupCancelled, StageError, describe_error
from .core.logging import Timer, log_context
from .core.models import SetupResult

logger = logging.getLogger(__name__)

StageAction = Callable[[], Awaitable[SetupResult | None]]


class StagePolicy(Enum):
    REQUIRED = "required"
    OPTIONAL = "optional"


class Progress(Protocol):
    """The spinner surface the pipeline drives."""

    def start(self, text: str | None = None) -> None: ...

    def update(self, text: str) -> None: ...

    def stop(self) -> None: ...


class NullProgress:
    """Progress sink used when no terminal spinner is attached."""

    def start(self, text: str | None = None) -> None:
        pass

    def update(self, text: str) -> None:
        pass

    def stop(self) -> None:
        pass


def _always(answers: ProjectAnswers) -> bool:
    return True


@dataclass(frozen=True)
class Stage:
    """
    One step of the canonical setup order.

    ``verbose`` stages stream their own child-process output, so the
    spinner is stopped while they run and restarted afterwards.
    """

    name: str
    label: str
    action: StageAction
    condition: Callable[[ProjectAnswers], bool] = _always
    policy: StagePolicy = StagePolicy.REQUIRED
    verbose: bool = False


@dataclass
class PipelineOutcome:
    completed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


async def _run_stage(stage: Stage) -> SetupResult | None:
    try:
        result: Any = await stage.action()
    except (SetupCancelled, StageError):
        raise
    except Exception as e:
        raise StageError(stage.name, describe_error(e), e) from e

    if isinstance(result, SetupResult) and not result.success:
        raise StageError(stage.name, result.message)
    return result


async def run_stages(
    stages: Sequence[Stage],
    answers: ProjectAnswers,
    progress: Progress | None = None,
) -> PipelineOutcome:
    """
    Run stages strictly in order, halting on the first required failure.

    Raises:
        SetupCancelled: Propagated untouched from any stage
        StageError: For the first REQUIRED stage that fails
    """
    progress = progress or NullProgress()
    outcome = PipelineOutcome()

    for stage in stages:
        if not stage.condition(answers):
            logger.debug("Skipping stage: %s", stage.name)
            outcome.skipped.append(stage.name)
            continue

        if stage.verbose:
            progress.stop()
        else:
            progress.update(stage.label)

        with log_context(stage=stage.name), Timer(stage.name) as timer:
            try:
                result = await _run_stage(stage)
            except StageError as e:
                if stage.policy is not StagePolicy.OPTIONAL:
                    raise
                logger.warning("Optional stage failed: %s", e)
                outcome.warnings.append(str(e))
                continue
            finally:
                if stage.verbose:
                    progress.start(stage.label)

        logger.debug("Stage finished: %s", stage.name, extra={"duration_ms": timer.duration_ms})
        if isinstance(result, SetupResult):
            outcome.warnings.extend(result.warnings)
        outcome.completed.append(stage.name)

    return outcome
