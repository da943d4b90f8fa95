"""
Domain models for dotstrap.

All models are re-exported here for convenient access:

    from dotstrap.core.models import Step, StepState, Profile, ActionResult
"""

from dotstrap.core.models.action import ActionResult
from dotstrap.core.models.build import BuildTarget
from dotstrap.core.models.profile import (
    BuildSpec,
    ConfigFileSpec,
    FrameworkSpec,
    PluginSpec,
    Profile,
    ToolSpec,
)
from dotstrap.core.models.step import (
    FailureKind,
    Outcome,
    PreconditionError,
    Step,
    StepKind,
    StepResult,
    StepState,
)

__all__ = [
    # action.py
    "ActionResult",
    # profile.py
    "BuildSpec",
    # build.py
    "BuildTarget",
    "ConfigFileSpec",
    # step.py
    "FailureKind",
    "FrameworkSpec",
    "Outcome",
    "PluginSpec",
    "PreconditionError",
    "Profile",
    "Step",
    "StepKind",
    "StepResult",
    "StepState",
    "ToolSpec",
]
