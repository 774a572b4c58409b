"""Interface of the per-stage handlers."""

from abc import ABC, abstractmethod

from tfruntask.domain.models.task_request import TaskRequest
from tfruntask.domain.models.task_response import TaskResponse


class StageHandler(ABC):
    """Runs one stage of a run task and builds its task result."""

    @abstractmethod
    async def handle(self, request: TaskRequest) -> TaskResponse:
        """Run the stage for ``request``.

        Returns:
            Finalized task result, ready to be sent on the callback
        """
        pass
