"""HCP Terraform API access and local storage."""

from tfruntask.infrastructure.platform.client import PlatformClient
from tfruntask.infrastructure.platform.files import FileManager

__all__ = ["PlatformClient", "FileManager"]
