"""
Step runner — check, act, verify for a single step.

Flow:
    check() ─ satisfied ──────────────────────────────→ SKIPPED
            └ missing → act() ─ failed, fatal ────────→ FAILED_FATAL
                              ├ failed, non-fatal ────→ FAILED
                              └ ok → verify() ─ false → FAILED_FATAL
                                              └ true ─→ PERFORMED

A step whose action reported success but whose post-condition does
not hold is always fatal, unless the step opts out with
``strict_verify=False``; then it is PERFORMED with ``verified=False``.
"""

from __future__ import annotations

import logging
import time

from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.step import (
    FailureKind,
    Outcome,
    PreconditionError,
    Step,
    StepResult,
    StepState,
)
from dotstrap.core.observability.logging_config import success

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def run_step(step: Step) -> StepResult:
    """Execute one step and return its outcome record.

    ``PreconditionError`` from ``check()`` or ``act()`` becomes a
    fatal precondition failure. Any other exception propagates.
    """
    start = time.monotonic()
    logger.info("Checking %s...", step.label)

    try:
        state = step.check()
        if state is StepState.SATISFIED:
            success(logger, "%s is already satisfied", step.label)
            return StepResult(
                name=step.name,
                kind=step.kind,
                outcome=Outcome.SKIPPED,
                message="already satisfied",
                duration_ms=_elapsed_ms(start),
            )

        logger.warning("%s not satisfied. Installing...", step.label)
        result = step.act()
    except PreconditionError as e:
        logger.error("%s", e.message)
        for hint in e.hints:
            logger.info("%s", hint)
        return StepResult(
            name=step.name,
            kind=step.kind,
            outcome=Outcome.FAILED_FATAL,
            failure=FailureKind.PRECONDITION,
            message=str(e),
            duration_ms=_elapsed_ms(start),
        )

    if result.failed:
        return _action_failed(step, result, start)

    if step.verify is not None and not step.verify():
        if step.strict_verify:
            logger.error(
                "%s reported success but could not be verified", step.label
            )
            return StepResult(
                name=step.name,
                kind=step.kind,
                outcome=Outcome.FAILED_FATAL,
                failure=FailureKind.VERIFICATION,
                message=f"{step.label} could not be verified after install",
                output=result.output,
                verified=False,
                duration_ms=_elapsed_ms(start),
                metadata=result.metadata,
            )
        logger.warning(
            "%s installed, but not visible in this session yet", step.label
        )
        return StepResult(
            name=step.name,
            kind=step.kind,
            outcome=Outcome.PERFORMED,
            message=result.output or "installed (unverified)",
            output=result.output,
            verified=False,
            duration_ms=_elapsed_ms(start),
            metadata=result.metadata,
        )

    success(logger, "%s done", step.label)
    return StepResult(
        name=step.name,
        kind=step.kind,
        outcome=Outcome.PERFORMED,
        message=result.output,
        output=result.output,
        duration_ms=_elapsed_ms(start),
        metadata=result.metadata,
    )


def _action_failed(step: Step, result: ActionResult, start: float) -> StepResult:
    error = result.error or f"{step.label} failed"
    if step.fatal:
        logger.error("%s failed: %s", step.label, error)
        outcome = Outcome.FAILED_FATAL
    else:
        logger.warning("%s failed, continuing: %s", step.label, error)
        outcome = Outcome.FAILED

    return StepResult(
        name=step.name,
        kind=step.kind,
        outcome=outcome,
        failure=FailureKind.EXTERNAL_COMMAND,
        message=error,
        output=result.output,
        duration_ms=_elapsed_ms(start),
        metadata=result.metadata,
    )
