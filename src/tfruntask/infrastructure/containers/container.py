"""Dependency injection container wiring settings, clients and handlers.

The container is built once at process entry. Tests and library users can
swap any provider, e.g. a stub platform client::

    container = get_container(settings=Settings(output_dir=tmp_path))
    container.platform_client.override(providers.Object(stub_client))
"""

from __future__ import annotations

from dependency_injector import containers, providers

from tfruntask.application.run_task import RunTaskService
from tfruntask.infrastructure.config import Settings, get_settings
from tfruntask.infrastructure.platform.client import PlatformClient
from tfruntask.infrastructure.platform.files import FileManager
from tfruntask.infrastructure.stages.registry import create_stage_handlers


class Container(containers.DeclarativeContainer):
    """Dependency injection container for tfruntask."""

    # Configuration (singleton, overridable with a custom Settings value)
    settings = providers.Singleton(get_settings)

    # Storage
    file_manager = providers.Singleton(FileManager)

    # Platform API access, closed on application shutdown
    platform_client = providers.Singleton(
        PlatformClient,
        file_manager=file_manager,
        api_token=settings.provided.api_token,
        timeout_seconds=settings.provided.http_timeout_seconds,
    )

    # Stage handlers, keyed by TaskStage
    stage_handlers = providers.Singleton(
        create_stage_handlers,
        provider=platform_client,
        file_manager=file_manager,
        output_dir=settings.provided.output_dir,
        reference_url_template=settings.provided.reference_url_template,
    )

    # Use cases
    run_task_service = providers.Singleton(
        RunTaskService,
        stage_handlers=stage_handlers,
        provider=platform_client,
    )


def get_container(settings: Settings | None = None) -> Container:
    """Create a container, optionally bound to explicit settings.

    Args:
        settings: Settings to use instead of the ones read from the environment

    Returns:
        A new Container instance
    """
    container = Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    return container
