"""
Pipeline — run an ordered list of steps, stopping at the first fatal one.

Steps run strictly in the order given. That order IS the dependency
order: a toolchain step precedes the build that uses it, a submodule
sync precedes the step that reads the fetched tree. ``requires``
declarations are validated up front so a misordered list fails before
anything touches the host.

Re-running after a partial failure is safe because every step's
``check()`` looks only at the current machine state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from dotstrap.core.engine.runner import run_step
from dotstrap.core.models.step import Outcome, Step, StepResult

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Ordered (step name, outcome) records of one run."""

    results: list[StepResult] = field(default_factory=list)
    aborted_at: str | None = None

    @property
    def ok(self) -> bool:
        """True when no fatal failure occurred."""
        return self.aborted_at is None

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def performed(self) -> int:
        return sum(1 for r in self.results if r.outcome is Outcome.PERFORMED)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.outcome is Outcome.SKIPPED)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    @property
    def status(self) -> str:
        if not self.ok:
            return "failed"
        if self.failed:
            return "partial"
        return "ok"

    def outcomes(self) -> list[tuple[str, Outcome]]:
        return [(r.name, r.outcome) for r in self.results]

    def get(self, name: str) -> StepResult | None:
        for r in self.results:
            if r.name == name:
                return r
        return None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "aborted_at": self.aborted_at,
            "total": self.total,
            "performed": self.performed,
            "skipped": self.skipped,
            "failed": self.failed,
            "steps": [r.to_dict() for r in self.results],
        }


def validate_order(steps: Sequence[Step]) -> list[str]:
    """Check names and ``requires`` declarations.

    Checks for:
    - Duplicate step names
    - Requirements naming a step that does not exist
    - Requirements naming a step that runs later

    Returns:
        List of error strings (empty = valid).
    """
    errors: list[str] = []
    positions: dict[str, int] = {}

    for i, step in enumerate(steps):
        if step.name in positions:
            errors.append(f"Duplicate step name: {step.name}")
        else:
            positions[step.name] = i

    for i, step in enumerate(steps):
        for dep in step.requires:
            if dep not in positions:
                errors.append(f"Step '{step.name}' requires unknown step '{dep}'")
            elif positions[dep] >= i:
                errors.append(f"Step '{step.name}' requires '{dep}', which runs after it")

    return errors


def run_pipeline(steps: Sequence[Step]) -> PipelineResult:
    """Run ``steps`` in order.

    Raises:
        ValueError: If the step list fails ``validate_order``.
    """
    errors = validate_order(steps)
    if errors:
        raise ValueError("Invalid step order:\n" + "\n".join(errors))

    result = PipelineResult()

    for i, step in enumerate(steps):
        logger.debug("Step %d/%d: %s", i + 1, len(steps), step.name)
        step_result = run_step(step)
        result.results.append(step_result)

        if step_result.aborts:
            result.aborted_at = step.name
            remaining = len(steps) - i - 1
            if remaining:
                logger.debug("Aborting; %d step(s) not run", remaining)
            break

    return result
