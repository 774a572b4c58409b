"""Task result models reported back to HCP Terraform.

A :class:`TaskResponse` is created empty when a stage starts, collects one
:class:`Outcome` per step the stage performs and is finalized with
:meth:`TaskResponse.set_result` before being serialized into the JSON:API
document the platform expects on the task result callback.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from enum import Enum
from itertools import chain
from typing import Any

import structlog
from pydantic import Field

from tfruntask.domain.models.base import ValueObject

logger = structlog.get_logger(__name__)

JSON_API_MEDIA_TYPE = "application/vnd.api+json"
TASK_RESULTS_TYPE = "task-results"
TASK_RESULT_OUTCOMES_TYPE = "task-result-outcomes"

# The platform UI breaks on anything else, so other values are dropped.
_ALLOWED_URL_PREFIXES = ("http://", "https://")


class TaskStatus(str, Enum):
    """Overall status of a task result."""

    PASSED = "passed"
    FAILED = "failed"
    RUNNING = "running"


class TagLevel(str, Enum):
    """Severity of an outcome tag."""

    NONE = "none"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Tag(ValueObject):
    """Label/severity pair rendered next to an outcome."""

    label: str = Field(..., description="Tag text")
    level: TagLevel = Field(..., description="Tag severity")

    def to_payload(self) -> dict[str, str]:
        return {"label": self.label, "level": self.level.value}


class OutcomeTags(ValueObject):
    """Tags of an outcome, grouped by category."""

    status: tuple[Tag, ...] = Field(default=(), description="Status tags")
    severity: tuple[Tag, ...] = Field(default=(), description="Severity tags")
    custom: tuple[Tag, ...] = Field(default=(), description="Free-form tags")

    def all_tags(self) -> Iterator[Tag]:
        """Iterate over the tags of every category."""
        return chain(self.status, self.severity, self.custom)

    def to_payload(self) -> dict[str, list[dict[str, str]]]:
        payload: dict[str, list[dict[str, str]]] = {}
        for category, tags in (
            ("status", self.status),
            ("severity", self.severity),
            ("custom", self.custom),
        ):
            if tags:
                payload[category] = [tag.to_payload() for tag in tags]
        return payload


class Outcome(ValueObject):
    """A single step or finding of a task result."""

    outcome_id: str = Field(..., description="Caller supplied identifier")
    description: str = Field(default="", description="Short label")
    body: str = Field(default="", description="Markdown details")
    url: str = Field(default="", description="Link to more information")
    tags: OutcomeTags = Field(default_factory=OutcomeTags, description="Categorized tags")

    @property
    def has_error(self) -> bool:
        return any(tag.level == TagLevel.ERROR for tag in self.tags.all_tags())

    def to_payload(self) -> dict[str, Any]:
        attributes: dict[str, Any] = {"outcome-id": self.outcome_id}
        if self.description:
            attributes["description"] = self.description
        if self.body:
            attributes["body"] = self.body
        if self.url:
            attributes["url"] = self.url
        attributes["tags"] = self.tags.to_payload()
        return {"type": TASK_RESULT_OUTCOMES_TYPE, "attributes": attributes}


class TaskResponse:
    """Task result for one stage, built up fluently.

    Every mutating method returns the same instance so calls can be chained::

        response = (
            TaskResponse()
            .add_outcome("save-request", "Request saved", "", url, "success", TagLevel.NONE)
            .set_result(TaskStatus.PASSED, "Pre Plan Stage - Success")
            .with_url(url)
        )

    Instances are request scoped and are not safe to share between requests.
    """

    def __init__(self) -> None:
        self._status: TaskStatus | None = None
        self._message = ""
        self._url = ""
        self._outcomes: list[Outcome] = []

    @property
    def status(self) -> TaskStatus | None:
        """Final status, None until :meth:`set_result` is called."""
        return self._status

    @property
    def message(self) -> str:
        return self._message

    @property
    def url(self) -> str:
        return self._url

    @property
    def outcomes(self) -> tuple[Outcome, ...]:
        return tuple(self._outcomes)

    def add_outcome(
        self,
        outcome_id: str,
        description: str,
        body: str,
        url: str,
        label: str,
        level: TagLevel,
    ) -> TaskResponse:
        """Append an outcome whose only status tag is ``label``/``level``.

        The outcome URL is stored as given; only the top level URL is checked.

        Args:
            outcome_id: Identifier of the outcome (uniqueness is up to the caller)
            description: Short label shown in the run UI
            body: Longer markdown content, may be empty
            url: Link for the outcome, may be empty
            label: Text of the status tag
            level: Severity of the status tag

        Returns:
            This response
        """
        outcome = Outcome(
            outcome_id=outcome_id,
            description=description,
            body=body,
            url=url,
            tags=OutcomeTags(status=(Tag(label=label, level=level),)),
        )
        return self.append(outcome)

    def append(self, outcome: Outcome) -> TaskResponse:
        """Append a pre-built outcome, e.g. one carrying several tag categories."""
        self._outcomes.append(outcome)
        return self

    def set_result(self, status: TaskStatus, message: str) -> TaskResponse:
        """Set the overall status and message, replacing earlier values.

        Meant to be called once all outcomes have been added.

        Raises:
            ValueError: If ``status`` is not a valid TaskStatus value
        """
        self._status = TaskStatus(status)
        self._message = message
        return self

    def with_url(self, url: str) -> TaskResponse:
        """Set the reference URL if it uses the http or https scheme.

        Any other value leaves the current URL untouched.
        """
        if url.startswith(_ALLOWED_URL_PREFIXES):
            self._url = url
        else:
            logger.debug("Ignoring task result URL without http(s) scheme", url=url)
        return self

    def is_passed(self) -> bool:
        """Return False if any outcome carries an error level tag."""
        for outcome in self._outcomes:
            if outcome.has_error:
                return False
        return True

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON:API document sent on the task result callback.

        An unset status is reported as ``running``.
        """
        status = self._status or TaskStatus.RUNNING
        attributes: dict[str, Any] = {"status": status.value}
        if self._message:
            attributes["message"] = self._message
        if self._url:
            attributes["url"] = self._url

        return {
            "data": {
                "type": TASK_RESULTS_TYPE,
                "attributes": attributes,
                "relationships": {
                    "outcomes": {
                        "data": [outcome.to_payload() for outcome in self._outcomes],
                    },
                },
            },
        }

    def to_json(self) -> str:
        return json.dumps(self.to_payload())

    def __repr__(self) -> str:
        status = self._status.value if self._status else None
        return f"TaskResponse(status={status!r}, outcomes={len(self._outcomes)})"
