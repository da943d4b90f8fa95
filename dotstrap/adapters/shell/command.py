"""
Subprocess runner — the SINGLE PLACE where ``subprocess.run`` is called.

Every package install, build, clone, and copy-with-privilege goes
through ``SubprocessRunner.run``. Logging and sudo handling are
centralised here.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from typing import Mapping, Sequence

from dotstrap.adapters.base import CommandResult, CommandRunner, format_argv
from dotstrap.core.observability.logging_config import VERBOSE

logger = logging.getLogger(__name__)


class SubprocessRunner(CommandRunner):
    """Run commands on the local host.

    No timeout is applied: a hung external command hangs the run,
    and the operator interrupts it.
    """

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
        if sudo and os.geteuid() != 0:
            cmd = ["sudo"] + cmd

        logger.log(VERBOSE, "CMD %s (cwd=%s)", format_argv(cmd), cwd or ".")
        start = time.monotonic()

        try:
            if interactive:
                proc = subprocess.run(
                    cmd,
                    cwd=cwd,
                    env=dict(env) if env is not None else None,
                    text=True,
                )
            else:
                proc = subprocess.run(
                    cmd,
                    cwd=cwd,
                    env=dict(env) if env is not None else None,
                    capture_output=True,
                    text=True,
                )
        except FileNotFoundError:
            return CommandResult(
                argv=cmd,
                returncode=127,
                stderr=f"{cmd[0]}: command not found",
            )
        except OSError as e:
            return CommandResult(argv=cmd, returncode=126, stderr=str(e))

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = proc.stdout or ""
        stderr = proc.stderr or ""

        if stdout:
            logger.debug("STDOUT %s", stdout.strip())
        if stderr:
            logger.debug("STDERR %s", stderr.strip())

        return CommandResult(
            argv=cmd,
            returncode=proc.returncode,
            stdout=stdout,
            stderr=stderr,
            duration_ms=elapsed_ms,
        )
