"""Interface to the HCP Terraform API used by the stage handlers."""

from abc import ABC, abstractmethod
from pathlib import Path

from tfruntask.domain.models.task_request import TaskRequest
from tfruntask.domain.models.task_response import TaskResponse


class PlatformDataProvider(ABC):
    """Fetches run data from the platform and reports task results to it."""

    @abstractmethod
    async def download_configuration_version(self, directory: Path, request: TaskRequest) -> None:
        """Download the run's configuration version archive and extract it into ``directory``."""
        pass

    @abstractmethod
    async def download_plan_json(self, directory: Path, request: TaskRequest) -> None:
        """Save the JSON plan of the run into ``directory``."""
        pass

    @abstractmethod
    async def get_data_from_api(self, directory: Path, data_type: str, request: TaskRequest) -> bool:
        """Save a run resource (``run``, ``plan``, ``apply``, ...) into ``directory``.

        Returns:
            False if the step was skipped because no API token is configured
        """
        pass

    @abstractmethod
    async def get_logs(self, directory: Path, log_type: str) -> bool:
        """Download the logs referenced by a previously saved ``<log_type>_api.json``.

        Returns:
            False if the step was skipped because the API document is missing
        """
        pass

    @abstractmethod
    async def send_task_result(self, request: TaskRequest, response: TaskResponse) -> None:
        """Send the task result to the request's callback URL."""
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None
