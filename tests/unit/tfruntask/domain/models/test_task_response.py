"""Unit tests for the task result builder."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from tfruntask.domain.models.task_response import (
    Outcome,
    OutcomeTags,
    Tag,
    TagLevel,
    TaskResponse,
    TaskStatus,
)


def _outcomes_of(response: TaskResponse) -> list[dict]:
    return response.to_payload()["data"]["relationships"]["outcomes"]["data"]


@pytest.mark.unit
class TestTaskResponseIsPassed:
    """Test the aggregate pass/fail rule."""

    def test_empty_response_is_passed(self) -> None:
        assert TaskResponse().is_passed() is True

    def test_single_error_outcome_fails(self) -> None:
        response = (
            TaskResponse()
            .add_outcome("a", "", "", "", "ok", TagLevel.NONE)
            .add_outcome("b", "", "", "", "ok", TagLevel.INFO)
            .add_outcome("c", "", "", "", "broken", TagLevel.ERROR)
            .add_outcome("d", "", "", "", "warn", TagLevel.WARNING)
        )
        assert response.is_passed() is False

    @pytest.mark.parametrize("level", [TagLevel.NONE, TagLevel.INFO, TagLevel.WARNING])
    def test_non_error_levels_pass(self, level: TagLevel) -> None:
        response = TaskResponse().add_outcome("a", "", "", "", "label", level)
        assert response.is_passed() is True

    def test_error_in_severity_category_fails(self) -> None:
        outcome = Outcome(
            outcome_id="custom",
            tags=OutcomeTags(
                status=(Tag(label="done", level=TagLevel.NONE),),
                severity=(Tag(label="High", level=TagLevel.ERROR),),
            ),
        )
        assert TaskResponse().append(outcome).is_passed() is False

    def test_is_passed_ignores_declared_status(self) -> None:
        response = TaskResponse().add_outcome("a", "", "", "", "x", TagLevel.ERROR)
        response.set_result(TaskStatus.PASSED, "claimed")
        assert response.is_passed() is False


@pytest.mark.unit
class TestTaskResponseUrl:
    """Test the reference URL scheme check."""

    @pytest.mark.parametrize("url", ["ftp://x", "x.com", "", "HTTPS://x.com", " https://x.com"])
    def test_rejected_urls_leave_url_unset(self, url: str) -> None:
        response = TaskResponse().with_url(url)
        assert response.url == ""
        assert "url" not in response.to_payload()["data"]["attributes"]

    @pytest.mark.parametrize("url", ["http://x", "https://x"])
    def test_accepted_urls_are_kept_verbatim(self, url: str) -> None:
        assert TaskResponse().with_url(url).url == url

    def test_rejected_url_keeps_previous_value(self) -> None:
        response = TaskResponse().with_url("https://first").with_url("ftp://second")
        assert response.url == "https://first"

    def test_outcome_url_is_not_checked(self) -> None:
        response = TaskResponse().add_outcome("a", "", "", "ftp://files", "x", TagLevel.NONE)
        assert _outcomes_of(response)[0]["attributes"]["url"] == "ftp://files"


@pytest.mark.unit
class TestTaskResponseBuilder:
    """Test chaining and outcome ordering."""

    def test_every_mutator_returns_same_instance(self) -> None:
        response = TaskResponse()
        assert response.add_outcome("a", "", "", "", "x", TagLevel.NONE) is response
        assert response.append(Outcome(outcome_id="b")) is response
        assert response.set_result(TaskStatus.FAILED, "m") is response
        assert response.with_url("https://x") is response
        assert response.with_url("nope") is response

    def test_outcomes_keep_insertion_order(self) -> None:
        response = TaskResponse()
        ids = [f"o{i}" for i in range(10)]
        for outcome_id in ids:
            response.add_outcome(outcome_id, "", "", "", "x", TagLevel.INFO)

        serialized = _outcomes_of(response)
        assert len(serialized) == 10
        assert [item["attributes"]["outcome-id"] for item in serialized] == ids

    def test_duplicate_ids_are_kept(self) -> None:
        response = (
            TaskResponse()
            .add_outcome("same", "", "", "", "x", TagLevel.NONE)
            .add_outcome("same", "", "", "", "x", TagLevel.NONE)
        )
        assert len(response.outcomes) == 2

    def test_set_result_last_call_wins(self) -> None:
        response = TaskResponse().set_result(TaskStatus.FAILED, "first").set_result(
            TaskStatus.PASSED, "second"
        )
        assert response.status == TaskStatus.PASSED
        assert response.message == "second"

    def test_set_result_accepts_status_value(self) -> None:
        response = TaskResponse().set_result("failed", "m")  # type: ignore[arg-type]
        assert response.status == TaskStatus.FAILED

    def test_set_result_rejects_unknown_status(self) -> None:
        with pytest.raises(ValueError):
            TaskResponse().set_result("pending", "m")  # type: ignore[arg-type]

    def test_outcomes_cannot_be_modified(self) -> None:
        response = TaskResponse().add_outcome("a", "d", "", "", "x", TagLevel.NONE)
        with pytest.raises(ValidationError):
            response.outcomes[0].description = "changed"  # type: ignore[misc]


@pytest.mark.unit
class TestTaskResponseSerialization:
    """Test the JSON:API document."""

    def test_scenario_document(self) -> None:
        response = (
            TaskResponse()
            .add_outcome("o1", "d", "b", "https://x.com/1", "ok", TagLevel.INFO)
            .set_result(TaskStatus.PASSED, "All good")
            .with_url("https://x.com/task")
        )

        assert json.loads(response.to_json()) == {
            "data": {
                "type": "task-results",
                "attributes": {
                    "status": "passed",
                    "message": "All good",
                    "url": "https://x.com/task",
                },
                "relationships": {
                    "outcomes": {
                        "data": [
                            {
                                "type": "task-result-outcomes",
                                "attributes": {
                                    "outcome-id": "o1",
                                    "description": "d",
                                    "body": "b",
                                    "url": "https://x.com/1",
                                    "tags": {"status": [{"label": "ok", "level": "info"}]},
                                },
                            }
                        ]
                    }
                },
            }
        }

    def test_empty_response_document(self) -> None:
        payload = TaskResponse().to_payload()

        assert payload["data"]["attributes"] == {"status": "running"}
        assert payload["data"]["relationships"] == {"outcomes": {"data": []}}

    def test_empty_strings_are_omitted(self) -> None:
        response = TaskResponse().add_outcome("o1", "", "", "", "ok", TagLevel.NONE)
        attributes = _outcomes_of(response)[0]["attributes"]
        assert attributes == {
            "outcome-id": "o1",
            "tags": {"status": [{"label": "ok", "level": "none"}]},
        }

    def test_all_tag_categories_are_serialized(self) -> None:
        outcome = Outcome(
            outcome_id="finding",
            tags=OutcomeTags(
                status=(Tag(label="Failed", level=TagLevel.ERROR),),
                severity=(Tag(label="Medium", level=TagLevel.WARNING),),
                custom=(Tag(label="aws", level=TagLevel.NONE),),
            ),
        )
        tags = _outcomes_of(TaskResponse().append(outcome))[0]["attributes"]["tags"]

        assert set(tags) == {"status", "severity", "custom"}
        assert tags["severity"] == [{"label": "Medium", "level": "warning"}]

    def test_repr_shows_status_and_count(self) -> None:
        response = TaskResponse().add_outcome("a", "", "", "", "x", TagLevel.NONE)
        assert repr(response) == "TaskResponse(status=None, outcomes=1)"
