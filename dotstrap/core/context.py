"""
Host context — the explicit view of the machine a run provisions.

HOME, the working directory, PATH, and the process environment are
captured ONCE at startup and threaded into every step factory.
Steps never ``chdir`` and never mutate ``os.environ``: commands get
``cwd=`` and ``env=`` from here instead.

    - CLI:    main.py → HostContext.from_environ()
    - Tests:  HostContext(home=str(tmp_path), cwd=..., path=...)
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field


class HostContext(BaseModel):
    """Everything a step needs to know about the host."""

    home: str
    cwd: str
    path: str = ""
    env: dict[str, str] = Field(default_factory=dict)
    is_root: bool = False

    @classmethod
    def from_environ(cls, cwd: Path | None = None) -> HostContext:
        """Snapshot the current process environment."""
        env = dict(os.environ)
        return cls(
            home=env.get("HOME") or str(Path.home()),
            cwd=str((cwd or Path.cwd()).resolve()),
            path=env.get("PATH", os.defpath),
            env=env,
            is_root=os.geteuid() == 0,
        )

    def expand(self, raw: str, base: Path | None = None) -> Path:
        """Resolve a profile path.

        ``~`` and ``$HOME`` expand to this context's home (not the
        process one). Relative paths resolve against ``base``, or the
        working directory when no base is given.
        """
        text = raw.replace("$HOME", self.home).replace("${HOME}", self.home)
        if text == "~" or text.startswith("~/"):
            text = self.home + text[1:]
        p = Path(text)
        if not p.is_absolute():
            p = (base or Path(self.cwd)) / p
        return p

    def command_env(self) -> dict[str, str]:
        """Environment for external commands, with HOME and PATH pinned."""
        env = dict(self.env)
        env["HOME"] = self.home
        if self.path:
            env["PATH"] = self.path
        return env
