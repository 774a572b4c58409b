"""Stage handlers for each point of a run a run task can be attached to."""

from __future__ import annotations

from tfruntask.domain.models.task_request import TaskStage
from tfruntask.infrastructure.stages.base import BaseStageHandler, StageStep

# Run resources collected once the run is past planning.
_RUN_ACTIVITY = ("policy-checks", "comments", "task-stages", "run-events")


class PrePlanHandler(BaseStageHandler):
    """Collects the request, the run and its configuration before planning."""

    stage = TaskStage.PRE_PLAN

    def steps(self) -> list[StageStep]:
        return [
            self.save_request_step(),
            self.api_step("run"),
            self.configuration_version_step(),
        ]


class PostPlanHandler(BaseStageHandler):
    """Collects the configuration, the plan and its logs after planning."""

    stage = TaskStage.POST_PLAN

    def steps(self) -> list[StageStep]:
        return [
            self.configuration_version_step(),
            self.save_request_step(),
            self.api_step("run"),
            self.plan_json_step(),
            self.api_step("plan"),
            # Needs plan_api.json written by the step above.
            self.logs_step("plan"),
        ]


class PreApplyHandler(BaseStageHandler):
    stage = TaskStage.PRE_APPLY

    def steps(self) -> list[StageStep]:
        return [
            self.save_request_step(),
            self.api_step("run"),
            *(self.api_step(data_type) for data_type in _RUN_ACTIVITY),
        ]


class PostApplyHandler(BaseStageHandler):
    stage = TaskStage.POST_APPLY

    def steps(self) -> list[StageStep]:
        return [
            self.save_request_step(),
            self.api_step("run"),
            self.api_step("apply"),
            self.logs_step("apply"),
            *(self.api_step(data_type) for data_type in _RUN_ACTIVITY),
        ]
