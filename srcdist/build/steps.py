# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
All-or-nothing step blocks.

The build and the packaging are each a sequence of steps that either all
succeed or stop at the first failure. run_steps executes such a sequence and
hands back a StepResult instead of raising, so the pipeline decides what a
failed block means (abort, keep the workspace, clean up) in one place.
"""

from dataclasses import dataclass, field
from typing import Callable

from srcdist.logging.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Step:
    """One named unit of work inside a block."""

    name: str
    action: Callable[[], object]


@dataclass(frozen=True)
class StepResult:
    """Outcome of a block: which steps ran, and the first failure if any."""

    ok: bool
    completed: list[str] = field(default_factory=list)
    failed_step: str | None = None
    error: str | None = None


def run_steps(block: str, steps: list[Step]) -> StepResult:
    """
    Run steps in order, stopping at the first one that raises.

    Args:
        block: Name of the block, used in log records.
        steps: The steps, in execution order.

    Returns:
        StepResult with ok=True if every step finished.
    """
    completed: list[str] = []

    for step in steps:
        logger.info("Step started", extra={"block": block, "step": step.name})
        try:
            step.action()
        except Exception as err:
            logger.error(
                "Step failed",
                extra={"block": block, "step": step.name, "error": str(err)},
            )
            return StepResult(ok=False, completed=completed, failed_step=step.name, error=str(err))
        completed.append(step.name)

    logger.info("Block complete", extra={"block": block, "steps": len(completed)})
    return StepResult(ok=True, completed=completed)
