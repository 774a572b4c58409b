"""Dependency injection containers."""

from tfruntask.infrastructure.containers.container import Container, get_container

__all__ = ["Container", "get_container"]
