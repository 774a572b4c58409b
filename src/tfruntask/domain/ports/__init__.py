"""Ports (interfaces) implemented by the infrastructure layer."""

from tfruntask.domain.ports.platform import PlatformDataProvider
from tfruntask.domain.ports.stage import StageHandler

__all__ = ["PlatformDataProvider", "StageHandler"]
