"""Base class for run task stage handlers.

A stage handler creates the run directory of a request, performs the stage's
data collection steps in order and turns every step into an outcome of the
task result. A failing step never stops the steps after it; the aggregate
status is derived from the outcomes once all steps have run.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import ClassVar, NamedTuple

import structlog

from tfruntask.domain.exceptions import RunTaskError, StageExecutionError
from tfruntask.domain.models.task_request import TaskRequest, TaskStage
from tfruntask.domain.models.task_response import TagLevel, TaskResponse, TaskStatus
from tfruntask.domain.ports.platform import PlatformDataProvider
from tfruntask.domain.ports.stage import StageHandler
from tfruntask.infrastructure.platform.files import FileManager

logger = structlog.get_logger(__name__)

SUCCESS_LABEL = "success"
SKIPPED_LABEL = "skipped"
FAILED_LABEL = "failed"

# Returns False when the step had nothing to do.
StepAction = Callable[[Path, TaskRequest], Awaitable[bool]]


class StageStep(NamedTuple):
    """One data collection step and the descriptions of its outcome."""

    outcome_id: str
    success: str
    failure: str
    action: StepAction
    skipped: str = ""


class BaseStageHandler(StageHandler):
    """Runs the data collection steps of one stage."""

    stage: ClassVar[TaskStage]

    def __init__(
        self,
        provider: PlatformDataProvider,
        file_manager: FileManager,
        output_dir: Path,
        reference_url_template: str,
    ) -> None:
        """Initialize the handler.

        Args:
            provider: Platform API access
            file_manager: Writes the request and API documents to disk
            output_dir: Root of the per-run directories
            reference_url_template: Link attached to every outcome and to the
                result, ``{run_id}`` is substituted
        """
        self._provider = provider
        self._file_manager = file_manager
        self._output_dir = output_dir
        self._reference_url_template = reference_url_template

    @abstractmethod
    def steps(self) -> list[StageStep]:
        """Ordered steps of the stage."""
        pass

    def reference_url(self, request: TaskRequest) -> str:
        return self._reference_url_template.format(run_id=request.run_id)

    async def handle(self, request: TaskRequest) -> TaskResponse:
        """Run the stage for ``request`` and return the finalized task result.

        Raises:
            StageExecutionError: If the run directory cannot be created or a
                request field is not a valid path segment. The error carries a
                failed response and no step has run.
        """
        log = logger.bind(run_id=request.run_id, stage=self.stage.value)
        reference_url = self.reference_url(request)
        response = TaskResponse()

        try:
            directory = request.create_run_directory(self._output_dir)
        except (OSError, ValueError) as e:
            log.error("Failed to create run directory", error=str(e))
            response.add_outcome(
                "create-directory",
                "Failed to create run directory",
                str(e),
                reference_url,
                FAILED_LABEL,
                TagLevel.ERROR,
            )
            response.set_result(TaskStatus.FAILED, self._message(passed=False)).with_url(reference_url)
            raise StageExecutionError(f"failed to create directory: {e}", response) from e

        log.info("Running stage", directory=str(directory))
        for step in self.steps():
            await self._run_step(step, directory, request, response, reference_url)

        passed = response.is_passed()
        response.set_result(
            TaskStatus.PASSED if passed else TaskStatus.FAILED,
            self._message(passed=passed),
        ).with_url(reference_url)
        log.info("Stage finished", passed=passed, outcomes=len(response.outcomes))
        return response

    async def _run_step(
        self,
        step: StageStep,
        directory: Path,
        request: TaskRequest,
        response: TaskResponse,
        reference_url: str,
    ) -> None:
        try:
            done = await step.action(directory, request)
        except (RunTaskError, OSError, ValueError) as e:
            logger.warning("Stage step failed", run_id=request.run_id, step=step.outcome_id, error=str(e))
            response.add_outcome(
                step.outcome_id, step.failure, str(e), reference_url, FAILED_LABEL, TagLevel.ERROR
            )
            return

        if done:
            response.add_outcome(
                step.outcome_id, step.success, "", reference_url, SUCCESS_LABEL, TagLevel.NONE
            )
        else:
            logger.info("Stage step skipped", run_id=request.run_id, step=step.outcome_id)
            response.add_outcome(
                step.outcome_id, step.skipped, "", reference_url, SKIPPED_LABEL, TagLevel.INFO
            )

    def _message(self, passed: bool) -> str:
        return f"{self.stage.display_name} Stage - {'Success' if passed else 'Failed'}"

    # Step factories shared by the stages

    def save_request_step(self) -> StageStep:
        async def action(directory: Path, request: TaskRequest) -> bool:
            self._file_manager.save_model(directory, "request.json", request)
            return True

        return StageStep(
            "save-request",
            "Request saved to file successfully",
            "Failed to save request to file",
            action,
        )

    def configuration_version_step(self) -> StageStep:
        async def action(directory: Path, request: TaskRequest) -> bool:
            await self._provider.download_configuration_version(directory, request)
            return True

        return StageStep(
            "download-configuration-version",
            "Configuration version downloaded successfully",
            "Failed to download configuration version",
            action,
        )

    def plan_json_step(self) -> StageStep:
        async def action(directory: Path, request: TaskRequest) -> bool:
            await self._provider.download_plan_json(directory, request)
            return True

        return StageStep(
            "download-plan-json",
            "Plan JSON downloaded successfully",
            "Failed to download plan JSON",
            action,
        )

    def api_step(self, data_type: str) -> StageStep:
        """Step saving the ``data_type`` resource of the run, e.g. ``policy-checks``."""
        subject = data_type.replace("-", " ")

        async def action(directory: Path, request: TaskRequest) -> bool:
            return await self._provider.get_data_from_api(directory, data_type, request)

        return StageStep(
            f"download-{data_type}",
            f"{subject.capitalize()} downloaded successfully",
            f"Failed to download {subject} from API",
            action,
            skipped=f"{subject.capitalize()} download skipped, no API token configured",
        )

    def logs_step(self, log_type: str) -> StageStep:
        async def action(directory: Path, request: TaskRequest) -> bool:
            return await self._provider.get_logs(directory, log_type)

        return StageStep(
            f"download-{log_type}-logs",
            f"{log_type.capitalize()} logs downloaded successfully",
            f"Failed to download {log_type} logs",
            action,
            skipped=f"{log_type.capitalize()} logs download skipped, no {log_type} API document",
        )
