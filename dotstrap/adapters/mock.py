"""
Mock runner — test double for every external command.

Records each call and answers with a configurable ``CommandResult``.
Responses and side effects are keyed by argv prefix, so
``("pacman", "-Q", "fzf")`` only matches that exact query while
``("pacman", "-S")`` matches any install.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Sequence

from dotstrap.adapters.base import CommandResult, CommandRunner


@dataclass
class MockCall:
    """One recorded invocation."""

    argv: list[str]
    cwd: str | None = None
    env: dict[str, str] | None = None
    sudo: bool = False
    interactive: bool = False


@dataclass
class _Rule:
    prefix: tuple[str, ...]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    effect: Callable[[list[str]], None] | None = field(default=None)


class MockRunner(CommandRunner):
    """Universal mock runner for testing.

    By default every command succeeds with empty output. The longest
    matching prefix rule wins.
    """

    def __init__(self, default_returncode: int = 0):
        self._default_returncode = default_returncode
        self._rules: list[_Rule] = []
        self._calls: list[MockCall] = []

    @property
    def calls(self) -> list[MockCall]:
        """All invocations this mock has received."""
        return self._calls

    @property
    def call_count(self) -> int:
        return len(self._calls)

    def calls_matching(self, *prefix: str) -> list[MockCall]:
        """Recorded calls whose argv starts with ``prefix``."""
        return [c for c in self._calls if tuple(c.argv[: len(prefix)]) == prefix]

    def set_response(
        self,
        prefix: Sequence[str],
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        """Answer commands starting with ``prefix`` with a fixed result."""
        self._upsert(_Rule(tuple(prefix), returncode, stdout, stderr))

    def set_failure(
        self,
        prefix: Sequence[str],
        returncode: int = 1,
        stderr: str = "Mock failure",
    ) -> None:
        """Configure commands starting with ``prefix`` to fail."""
        self._upsert(_Rule(tuple(prefix), returncode, "", stderr))

    def on(
        self,
        prefix: Sequence[str],
        effect: Callable[[list[str]], None],
        returncode: int = 0,
    ) -> None:
        """Run ``effect(argv)`` whenever a matching command is invoked.

        Used to simulate the state change a real command would cause,
        e.g. marking packages installed after an install call.
        """
        self._upsert(_Rule(tuple(prefix), returncode, effect=effect))

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: str | None = None,
        env: Mapping[str, str] | None = None,
        sudo: bool = False,
        interactive: bool = False,
    ) -> CommandResult:
        cmd = list(argv)
        self._calls.append(
            MockCall(
                argv=cmd,
                cwd=cwd,
                env=dict(env) if env is not None else None,
                sudo=sudo,
                interactive=interactive,
            )
        )

        rule = self._match(cmd)
        if rule is None:
            return CommandResult(argv=cmd, returncode=self._default_returncode)

        if rule.effect is not None:
            rule.effect(cmd)
        return CommandResult(
            argv=cmd,
            returncode=rule.returncode,
            stdout=rule.stdout,
            stderr=rule.stderr,
        )

    def reset(self) -> None:
        """Clear call log and rules."""
        self._calls.clear()
        self._rules.clear()

    def _upsert(self, rule: _Rule) -> None:
        self._rules = [r for r in self._rules if r.prefix != rule.prefix]
        self._rules.append(rule)

    def _match(self, argv: list[str]) -> _Rule | None:
        best: _Rule | None = None
        for rule in self._rules:
            if tuple(argv[: len(rule.prefix)]) != rule.prefix:
                continue
            if best is None or len(rule.prefix) > len(best.prefix):
                best = rule
        return best
