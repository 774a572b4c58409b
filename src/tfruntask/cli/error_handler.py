"""Rendering of errors raised by CLI commands."""

from typing import Any, NoReturn

import structlog
import typer
from pydantic import ValidationError
from rich.console import Console

from tfruntask.domain.exceptions import PlatformAPIError, RunTaskError

logger = structlog.get_logger(__name__)
error_console = Console(stderr=True)


def handle_cli_error(error: Exception, context: dict[str, Any] | None = None) -> NoReturn:
    """Print a readable message for ``error`` and exit with status 1.

    Args:
        error: Exception raised by the command
        context: Extra values logged with the error (file, stage, ...)
    """
    context = context or {}
    logger.debug("CLI command failed", error=str(error), error_type=type(error).__name__, **context)

    if isinstance(error, ValidationError):
        error_console.print(f"[bold red]Invalid run task request:[/bold red] {error.error_count()} error(s)")
        for detail in error.errors():
            location = ".".join(str(part) for part in detail["loc"]) or "<root>"
            error_console.print(f"  • {location}: {detail['msg']}")
    elif isinstance(error, PlatformAPIError):
        status = f" (HTTP {error.status_code})" if error.status_code else ""
        error_console.print(f"[bold red]Platform API error{status}:[/bold red] {error}")
    elif isinstance(error, RunTaskError):
        error_console.print(f"[bold red]Error:[/bold red] {error}")
    elif isinstance(error, OSError):
        error_console.print(f"[bold red]File error:[/bold red] {error}")
    else:
        error_console.print(f"[bold red]Unexpected error:[/bold red] {error}")

    raise typer.Exit(code=1)
