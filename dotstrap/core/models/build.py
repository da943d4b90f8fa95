"""
Build target — a binary built from a nested source tree.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class BuildTarget(BaseModel):
    """Where to build from and where the result goes.

    ``manifest`` and ``output`` are relative to ``source_dir``.
    ``source_dir`` and the manifest must exist before a build is
    attempted; ``install_path`` must resolve on PATH afterwards for
    verification to pass.
    """

    source_dir: Path
    manifest: str
    output: str
    install_path: Path

    @property
    def manifest_path(self) -> Path:
        return self.source_dir / self.manifest

    @property
    def output_path(self) -> Path:
        return self.source_dir / self.output

    @property
    def binary_name(self) -> str:
        return self.install_path.name
