"""Domain models for tfruntask."""

from tfruntask.domain.models.task_request import VERIFICATION_TOKEN, TaskRequest, TaskStage
from tfruntask.domain.models.task_response import (
    JSON_API_MEDIA_TYPE,
    Outcome,
    OutcomeTags,
    Tag,
    TagLevel,
    TaskResponse,
    TaskStatus,
)

__all__ = [
    # Inbound request
    "TaskRequest",
    "TaskStage",
    "VERIFICATION_TOKEN",
    # Task result
    "TaskResponse",
    "TaskStatus",
    "Outcome",
    "OutcomeTags",
    "Tag",
    "TagLevel",
    "JSON_API_MEDIA_TYPE",
]
