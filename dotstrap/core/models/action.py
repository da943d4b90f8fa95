"""
Action results — what a step's ``act()`` hands back.

A failing external command is a value, not an exception: the step
returns ``ActionResult.failure`` and the runner decides whether the
failure aborts the pipeline.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from dotstrap.adapters.base import CommandResult


class ActionResult(BaseModel):
    """Outcome of a step action."""

    status: Literal["ok", "failed"] = "ok"
    output: str = ""
    error: str | None = None
    duration_ms: int = 0
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, output: str = "", **kwargs: Any) -> ActionResult:
        """Create a success result."""
        return cls(status="ok", output=output, **kwargs)

    @classmethod
    def failure(cls, error: str, **kwargs: Any) -> ActionResult:
        """Create a failure result."""
        return cls(status="failed", error=error, **kwargs)

    @classmethod
    def from_command(cls, result: CommandResult, output: str = "") -> ActionResult:
        """Translate a command result, keeping its output on failure."""
        metadata = {"command": result.command, "return_code": result.returncode}
        if result.ok:
            return cls.success(
                output=output or result.stdout.strip(),
                duration_ms=result.duration_ms,
                metadata=metadata,
            )
        return cls.failure(
            error=result.describe(),
            output=result.output_tail(),
            duration_ms=result.duration_ms,
            metadata=metadata,
        )
