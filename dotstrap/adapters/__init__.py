"""Adapters — bindings to external commands.

Public re-exports for convenient access.
"""

from dotstrap.adapters.base import CommandResult, CommandRunner
from dotstrap.adapters.mock import MockRunner
from dotstrap.adapters.shell.command import SubprocessRunner
from dotstrap.adapters.shell.probe import CommandProbe

__all__ = [
    "CommandProbe",
    "CommandResult",
    "CommandRunner",
    "MockRunner",
    "SubprocessRunner",
]
