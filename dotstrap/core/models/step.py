"""
Step model — one unit of the provisioning pipeline.

A Step bundles three phases:

    check()  → StepState     is the host already in the desired state?
    act()    → ActionResult  make it so
    verify() → bool          did it work?

Steps are built by the factories in ``dotstrap.core.steps``, run once
by the engine, and discarded. Nothing about a step is persisted: every
``check()`` looks at the machine as it is right now.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Sequence

from dotstrap.core.models.action import ActionResult


class StepState(str, Enum):
    SATISFIED = "satisfied"
    MISSING = "missing"


class Outcome(str, Enum):
    """What happened to a step during a run."""

    SKIPPED = "skipped"              # already satisfied
    PERFORMED = "performed"          # acted successfully
    FAILED_FATAL = "failed_fatal"    # aborts the pipeline
    FAILED = "failed"                # non-fatal, run continues


class FailureKind(str, Enum):
    PRECONDITION = "precondition"
    EXTERNAL_COMMAND = "external_command"
    VERIFICATION = "verification"


class StepKind(str, Enum):
    """Tagged variant of the step factories."""

    PROBE = "probe"
    PACKAGE = "package"
    BUILD = "build"
    FILE = "file"


class PreconditionError(Exception):
    """Required platform, tooling, or source tree is absent.

    Raised from ``check()`` or ``act()`` before any side effect is
    attempted. Always fatal.
    """

    def __init__(self, message: str, hints: Sequence[str] = ()):
        super().__init__(message)
        self.message = message
        self.hints = list(hints)

    def __str__(self) -> str:
        if not self.hints:
            return self.message
        return "\n".join([self.message, *self.hints])


@dataclass
class Step:
    """A named, checkable, installable, verifiable unit of work."""

    name: str
    check: Callable[[], StepState]
    act: Callable[[], ActionResult]
    verify: Callable[[], bool] | None = None
    fatal: bool = True
    strict_verify: bool = True       # False: failed verify only warns
    kind: StepKind = StepKind.PROBE
    label: str = ""                  # human-readable, defaults to name
    requires: tuple[str, ...] = ()   # step names that must run earlier

    def __post_init__(self) -> None:
        if not self.label:
            self.label = self.name


@dataclass
class StepResult:
    """Outcome record for one executed step."""

    name: str
    outcome: Outcome
    kind: StepKind = StepKind.PROBE
    failure: FailureKind | None = None
    message: str = ""
    output: str = ""
    verified: bool = True
    duration_ms: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.outcome in (Outcome.FAILED, Outcome.FAILED_FATAL)

    @property
    def aborts(self) -> bool:
        """Whether this outcome stops the pipeline."""
        return self.outcome is Outcome.FAILED_FATAL

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "outcome": self.outcome.value,
            "failure": self.failure.value if self.failure else None,
            "message": self.message,
            "output": self.output,
            "verified": self.verified,
            "duration_ms": self.duration_ms,
            "metadata": self.metadata,
        }
