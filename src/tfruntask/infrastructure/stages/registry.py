"""Factory for the stage handler registry."""

from __future__ import annotations

from pathlib import Path

from tfruntask.domain.models.task_request import TaskStage
from tfruntask.domain.ports.platform import PlatformDataProvider
from tfruntask.infrastructure.platform.files import FileManager
from tfruntask.infrastructure.stages.base import BaseStageHandler
from tfruntask.infrastructure.stages.handlers import (
    PostApplyHandler,
    PostPlanHandler,
    PreApplyHandler,
    PrePlanHandler,
)

_HANDLER_CLASSES: tuple[type[BaseStageHandler], ...] = (
    PrePlanHandler,
    PostPlanHandler,
    PreApplyHandler,
    PostApplyHandler,
)


def create_stage_handlers(
    provider: PlatformDataProvider,
    file_manager: FileManager,
    output_dir: Path,
    reference_url_template: str,
) -> dict[TaskStage, BaseStageHandler]:
    """Create one handler per stage.

    Args:
        provider: Platform API access shared by all handlers
        file_manager: File manager shared by all handlers
        output_dir: Root of the per-run directories
        reference_url_template: Link attached to task results, ``{run_id}`` is substituted

    Returns:
        Mapping of every TaskStage to its handler
    """
    return {
        handler_cls.stage: handler_cls(provider, file_manager, output_dir, reference_url_template)
        for handler_cls in _HANDLER_CLASSES
    }
