"""
Configuration loader — reads dotstrap.yml into a Profile.

The profile is optional: with no file, the built-in defaults apply
and the working directory is the repository root.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from dotstrap.core.models.profile import Profile

logger = logging.getLogger(__name__)

# Default config filename
PROFILE_CONFIG_FILE = "dotstrap.yml"


class ConfigError(Exception):
    """Raised when the profile is unreadable or invalid."""


def find_profile_file(start_dir: Path | None = None) -> Path | None:
    """Search for dotstrap.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to dotstrap.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / PROFILE_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_profile(path: Path | None = None) -> Profile:
    """Load and validate a profile.

    Args:
        path: Explicit path to dotstrap.yml. None means defaults.

    Returns:
        Validated Profile model.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    if path is None:
        logger.debug("No %s, using built-in profile", PROFILE_CONFIG_FILE)
        return Profile()

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading profile from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "profile" key or be flat
    profile_data = data.get("profile", data)

    try:
        profile = Profile.model_validate(profile_data)
    except Exception as e:
        raise ConfigError(f"Invalid profile configuration: {e}") from e

    logger.debug(
        "Loaded profile '%s' (%d packages, %d builds)",
        profile.name, len(profile.packages), len(profile.builds),
    )
    return profile


def repo_root(config_path: Path | None, cwd: Path | None = None) -> Path:
    """Repository root: the profile's directory, else the working directory."""
    if config_path is not None:
        return config_path.parent.resolve()
    return (cwd or Path.cwd()).resolve()
