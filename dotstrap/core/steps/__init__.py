"""
Step factories — each returns a ready-to-run ``Step``.

    PROBE   → requirement_step, system_check_step, privilege_step,
              framework_step, clone_step, submodule_step
    PACKAGE → package_step, tool_step, upgrade_step
    BUILD   → build_install_step
    FILE    → file_install_step
"""

from dotstrap.core.steps.build import build_install_step
from dotstrap.core.steps.files import (
    backup_path,
    file_install_step,
    free_backup_path,
    same_content,
)
from dotstrap.core.steps.packages import (
    missing_packages,
    package_step,
    tool_step,
    upgrade_step,
)
from dotstrap.core.steps.shell import framework_step
from dotstrap.core.steps.system import privilege_step, requirement_step, system_check_step
from dotstrap.core.steps.vcs import clone_step, submodule_step

__all__ = [
    "backup_path",
    "build_install_step",
    "clone_step",
    "file_install_step",
    "free_backup_path",
    "framework_step",
    "missing_packages",
    "package_step",
    "privilege_step",
    "requirement_step",
    "same_content",
    "submodule_step",
    "system_check_step",
    "tool_step",
    "upgrade_step",
]
