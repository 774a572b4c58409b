"""Run task use case: run the stage of a request and report its result."""

from __future__ import annotations

from collections.abc import Mapping

import structlog

from tfruntask.domain.exceptions import UnknownStageError
from tfruntask.domain.models.task_request import TaskRequest, TaskStage
from tfruntask.domain.models.task_response import TaskResponse
from tfruntask.domain.ports.platform import PlatformDataProvider
from tfruntask.domain.ports.stage import StageHandler

logger = structlog.get_logger(__name__)


class RunTaskService:
    """Dispatches requests to their stage handler and sends the task result."""

    def __init__(
        self,
        stage_handlers: Mapping[TaskStage, StageHandler],
        provider: PlatformDataProvider,
    ) -> None:
        self._stage_handlers = stage_handlers
        self._provider = provider

    async def handle_stage(self, request: TaskRequest) -> TaskResponse:
        """Run the stage handler of ``request`` without sending the result.

        Raises:
            UnknownStageError: If no handler exists for the request's stage
            StageExecutionError: If the handler could not run at all
        """
        stage = request.task_stage
        handler = self._stage_handlers.get(stage) if stage is not None else None
        if handler is None:
            logger.warning("Unknown stage", stage=request.stage, run_id=request.run_id)
            raise UnknownStageError(request.stage)
        return await handler.handle(request)

    async def process(self, request: TaskRequest, send_callback: bool = True) -> TaskResponse:
        """Run the stage of ``request`` and send the result to its callback URL.

        Args:
            request: Decoded run task request
            send_callback: Set to False to only build the result

        Returns:
            The task result that was (or would have been) sent

        Raises:
            UnknownStageError: If no handler exists for the request's stage
            StageExecutionError: If the handler could not run at all
            PlatformAPIError: If the task result could not be delivered
        """
        response = await self.handle_stage(request)
        if send_callback:
            await self._provider.send_task_result(request, response)
        return response
