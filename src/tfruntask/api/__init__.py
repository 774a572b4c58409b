"""HTTP application receiving run task requests."""

from tfruntask.api.app import create_app

__all__ = ["create_app"]
