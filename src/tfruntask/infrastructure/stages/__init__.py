"""Stage handlers collecting run data for each run task stage."""

from tfruntask.infrastructure.stages.base import BaseStageHandler, StageStep
from tfruntask.infrastructure.stages.handlers import (
    PostApplyHandler,
    PostPlanHandler,
    PreApplyHandler,
    PrePlanHandler,
)
from tfruntask.infrastructure.stages.registry import create_stage_handlers

__all__ = [
    "BaseStageHandler",
    "StageStep",
    "PrePlanHandler",
    "PostPlanHandler",
    "PreApplyHandler",
    "PostApplyHandler",
    "create_stage_handlers",
]
