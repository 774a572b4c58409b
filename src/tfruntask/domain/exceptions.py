"""Exceptions raised by tfruntask."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tfruntask.domain.models.task_response import TaskResponse


class RunTaskError(Exception):
    """Base class for all tfruntask errors."""


class SignatureRejected(RunTaskError):
    """Inbound request failed the shared secret signature policy."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class UnknownStageError(RunTaskError):
    """Request names a stage this service has no handler for."""

    def __init__(self, stage: str) -> None:
        super().__init__(f"unknown stage {stage}")
        self.stage = stage


class StageExecutionError(RunTaskError):
    """Stage could not run at all; ``response`` holds the failed result."""

    def __init__(self, message: str, response: TaskResponse) -> None:
        super().__init__(message)
        self.response = response


class PlatformAPIError(RunTaskError):
    """Request to the HCP Terraform API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ArchiveExtractionError(RunTaskError):
    """Configuration version archive could not be extracted."""
