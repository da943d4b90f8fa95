"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from dotstrap.adapters.mock import MockRunner
from dotstrap.adapters.shell.probe import CommandProbe
from dotstrap.core.context import HostContext


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    """Return an empty directory used as the only PATH entry."""
    d = tmp_path / "bin"
    d.mkdir()
    return d


@pytest.fixture
def home_dir(tmp_path: Path) -> Path:
    d = tmp_path / "home"
    d.mkdir()
    return d


@pytest.fixture
def repo_dir(tmp_path: Path) -> Path:
    """Return a temporary dotfiles repository root."""
    d = tmp_path / "repo"
    d.mkdir()
    return d


@pytest.fixture
def context(home_dir: Path, repo_dir: Path, bin_dir: Path) -> HostContext:
    """Host context confined to tmp_path."""
    return HostContext(
        home=str(home_dir),
        cwd=str(repo_dir),
        path=str(bin_dir),
        env={"LANG": "C"},
        is_root=False,
    )


@pytest.fixture
def probe(bin_dir: Path) -> CommandProbe:
    return CommandProbe(str(bin_dir))


@pytest.fixture
def runner() -> MockRunner:
    return MockRunner()


@pytest.fixture
def make_executable(bin_dir: Path):
    """Factory: drop an executable stub named ``name`` into the PATH dir."""

    def _make(name: str, directory: Path | None = None) -> Path:
        target_dir = directory or bin_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        exe = target_dir / name
        exe.write_text("#!/bin/sh\nexit 0\n")
        exe.chmod(0o755)
        return exe

    return _make
