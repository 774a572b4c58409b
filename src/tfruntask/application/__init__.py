"""Application use cases."""

from tfruntask.application.run_task import RunTaskService

__all__ = ["RunTaskService"]
