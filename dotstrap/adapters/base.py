"""
Runner base — the contract between steps and external commands.

Steps never call ``subprocess`` directly. They talk to a
``CommandRunner``, which executes an argv and hands back a
``CommandResult``. Tests swap in ``MockRunner`` so no real package
manager, compiler, or git binary is ever touched.
"""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod
from typing import Mapping, Sequence

from pydantic import BaseModel

# Tail of captured output kept in failure messages
OUTPUT_TAIL_CHARS = 2000


def format_argv(argv: Sequence[str]) -> str:
    """Render an argv list the way a shell user would type it."""
    return " ".join(shlex.quote(a) for a in argv)


class CommandResult(BaseModel):
    """Outcome of one external command.

    Runners NEVER raise for a non-zero exit. The exit code and the
    captured streams are recorded here and the caller decides.
    """

    argv: list[str]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.returncode == 0

    @property
    def command(self) -> str:
        return format_argv(self.argv)

    def output_tail(self, limit: int = OUTPUT_TAIL_CHARS) -> str:
        """Last ``limit`` characters of stderr, or stdout if stderr is empty."""
        text = (self.stderr or self.stdout or "").strip()
        return text[-limit:]

    def describe(self) -> str:
        """Multi-line failure description including the command's own output."""
        message = f"Command failed (exit {self.returncode}): {self.command}"
        tail = self.output_tail()
        if tail:
            message += f"\n{tail}"
        return message


class CommandRunner(ABC):
    """Abstract interface for running external commands.

    To add a runner:
        1. Subclass CommandRunner
        2. Implement ``run``
        3. Pass it to ``run_install`` (or a step factory)
    """

    @abstractmethod
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        sudo: bool = False,
        interactive: bool = False,
    ) -> CommandResult:
        """Run ``argv`` and return its result.

        Args:
            argv: Command and arguments.
            cwd: Working directory for the command.
            env: Complete environment for the command.
            sudo: Run with elevated privilege.
            interactive: Inherit the terminal instead of capturing
                output (package-manager prompts).

        MUST never raise for a failing command.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}>"
