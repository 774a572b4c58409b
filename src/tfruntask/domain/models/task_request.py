"""Run task request sent by HCP Terraform."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationInfo, field_validator

from tfruntask.domain.models.base import ValueObject

# Nonsense API token the platform sends when it validates the endpoint. It is never valid.
VERIFICATION_TOKEN = "test-token"


def path_segment(value: str, name: str) -> str:
    """Return ``value`` if it can be used as a single directory or file name.

    Raises:
        ValueError: If ``value`` is empty, ``.`` or ``..``, or contains a path separator
    """
    if value in ("", ".", "..") or "/" in value or "\\" in value:
        raise ValueError(f"invalid {name} for a path: {value!r}")
    return value


class TaskStage(str, Enum):
    """Stages of a run at which a run task can be invoked."""

    PRE_PLAN = "pre_plan"
    POST_PLAN = "post_plan"
    PRE_APPLY = "pre_apply"
    POST_APPLY = "post_apply"

    @property
    def order(self) -> int:
        return list(TaskStage).index(self) + 1

    @property
    def folder_name(self) -> str:
        """Directory name of the stage, prefixed with its position in the run."""
        return f"{self.order}_{self.value}"

    @property
    def display_name(self) -> str:
        """Human readable name, e.g. ``Pre Plan``."""
        return self.value.replace("_", " ").title()


class TaskRequest(ValueObject):
    """Top level message sent to the run task."""

    access_token: str = Field(default="", description="Token scoped to this task result")
    configuration_version_download_url: str = Field(default="")
    configuration_version_id: str = Field(default="")
    is_speculative: bool = Field(default=False)
    organization_name: str = Field(default="")
    payload_version: int = Field(default=1)
    run_app_url: str = Field(default="")
    run_created_at: datetime | None = Field(default=None)
    run_created_by: str = Field(default="")
    run_id: str = Field(default="")
    run_message: str = Field(default="")
    stage: str = Field(default="", description="Raw stage name, see task_stage")
    task_result_callback_url: str = Field(default="")
    task_result_enforcement_level: str = Field(default="")
    task_result_id: str = Field(default="")
    vcs_branch: str = Field(default="")
    vcs_commit_url: str = Field(default="")
    vcs_pull_request_url: str = Field(default="")
    vcs_repo_url: str = Field(default="")
    workspace_app_url: str = Field(default="")
    workspace_id: str = Field(default="")
    workspace_name: str = Field(default="")
    workspace_working_directory: str = Field(default="")
    plan_json_api_url: str = Field(default="")

    @field_validator("*", mode="before")
    @classmethod
    def _null_as_default(cls, value: Any, info: ValidationInfo) -> Any:
        # The platform sends null for unset VCS fields.
        if value is None and info.field_name is not None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value

    def is_endpoint_validation(self) -> bool:
        """Return True for the platform's endpoint validation request.

        Callers should answer these with HTTP 200 right away.
        """
        return self.access_token == VERIFICATION_TOKEN

    @property
    def task_stage(self) -> TaskStage | None:
        """Stage of the request, None if the platform sent an unknown stage."""
        try:
            return TaskStage(self.stage)
        except ValueError:
            return None

    @property
    def hostname(self) -> str:
        """Base URL of the platform, taken from the callback URL.

        ``https://app.terraform.io/api/v2/task-results/...`` gives
        ``https://app.terraform.io``; an empty string if there is no ``/api/`` part.
        """
        callback_url = self.task_result_callback_url
        index = callback_url.find("/api/")
        if index == -1:
            return ""
        return callback_url[:index]

    def run_directory(self, root: Path) -> Path:
        """Directory holding this request's files: ``<root>/<workspace>/<run>/<n_stage>``.

        Raises:
            ValueError: If a segment would escape ``root``
        """
        stage = self.task_stage
        stage_folder = stage.folder_name if stage is not None else self.stage
        return (
            root
            / path_segment(self.workspace_name, "workspace_name")
            / path_segment(self.run_id, "run_id")
            / path_segment(stage_folder, "stage")
        )

    def create_run_directory(self, root: Path) -> Path:
        """Create :meth:`run_directory` and its parents.

        Raises:
            OSError: If the directory cannot be created
            ValueError: If a segment would escape ``root``
        """
        path = self.run_directory(root)
        path.mkdir(parents=True, exist_ok=True)
        return path
