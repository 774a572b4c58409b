"""tfruntask command line entry point."""

from pathlib import Path
from typing import Any

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from tfruntask import __version__
from tfruntask.api.app import create_app
from tfruntask.cli.error_handler import handle_cli_error
from tfruntask.cli.utils import async_command
from tfruntask.domain.models.task_request import TaskRequest
from tfruntask.domain.models.task_response import TagLevel, TaskResponse, TaskStatus
from tfruntask.infrastructure.config import Settings, get_settings
from tfruntask.infrastructure.containers import get_container
from tfruntask.infrastructure.logging_setup import configure_logging
from tfruntask.infrastructure.security.signature import compute_signature, verify_signature

app = typer.Typer(help="HCP Terraform run task server", no_args_is_help=True)
console = Console()

_LEVEL_STYLES = {
    TagLevel.NONE: "green",
    TagLevel.INFO: "cyan",
    TagLevel.WARNING: "yellow",
    TagLevel.ERROR: "bold red",
}


@app.callback()
def main() -> None:
    """Receive HCP Terraform run task requests and collect run data."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.json_logs)


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Interface to listen on"),
    port: int | None = typer.Option(None, help="Port to listen on"),
    path: str | None = typer.Option(None, help="Route receiving run task requests"),
    hmac_key: str | None = typer.Option(None, help="HMAC key configured on the run task"),
    output_dir: Path | None = typer.Option(None, help="Root of the per-run directories"),
    log_level: str | None = typer.Option(None, help="Log level (DEBUG, INFO, ...)"),
    json_logs: bool | None = typer.Option(None, "--json-logs/--console-logs", help="Log format"),
) -> None:
    """Start the run task HTTP server."""
    flags: dict[str, Any] = {
        "host": host,
        "port": port,
        "path": path,
        "hmac_key": hmac_key,
        "output_dir": output_dir,
        "log_level": log_level,
        "json_logs": json_logs,
    }
    settings = Settings(**{name: value for name, value in flags.items() if value is not None})
    configure_logging(settings.log_level, settings.json_logs)

    console.print(
        f"Listening on [bold]http://{settings.host}:{settings.port}{settings.path}[/bold]",
        style="cyan",
    )
    uvicorn.run(
        create_app(get_container(settings)),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


@app.command()
def sign(
    payload: Path = typer.Argument(..., exists=True, dir_okay=False, help="Request body file"),
    hmac_key: str = typer.Option(..., envvar="TFRUNTASK_HMAC_KEY", help="HMAC key"),
) -> None:
    """Print the X-Tfc-Task-Signature value of a request body."""
    console.print(compute_signature(payload.read_bytes(), hmac_key), soft_wrap=True)


@app.command()
def verify(
    payload: Path = typer.Argument(..., exists=True, dir_okay=False, help="Request body file"),
    signature: str = typer.Option(..., help="Signature to check"),
    hmac_key: str = typer.Option(..., envvar="TFRUNTASK_HMAC_KEY", help="HMAC key"),
) -> None:
    """Check a signature against a request body."""
    if verify_signature(payload.read_bytes(), signature, hmac_key):
        console.print("✓ Signature is valid", style="bold green")
        return
    console.print("✗ Signature does not match", style="bold red")
    raise typer.Exit(code=1)


@app.command()
@async_command
async def replay(
    payload: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved run task request"),
    output_dir: Path | None = typer.Option(None, help="Root of the per-run directories"),
    send_callback: bool = typer.Option(
        False, "--send-callback", help="PATCH the result to the request's callback URL"
    ),
) -> None:
    """Run a saved request (e.g. a request.json) through its stage handler."""
    settings = Settings(output_dir=output_dir) if output_dir is not None else get_settings()
    container = get_container(settings)
    try:
        request = TaskRequest.model_validate_json(payload.read_bytes())
        response = await container.run_task_service().process(request, send_callback=send_callback)
    except Exception as e:
        handle_cli_error(e, context={"payload": str(payload)})
    finally:
        await container.platform_client().close()

    _display_response(response)
    if response.status != TaskStatus.PASSED:
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Show the tfruntask version."""
    console.print(f"tfruntask {__version__}")


def _display_response(response: TaskResponse) -> None:
    table = Table(title="Outcomes")
    table.add_column("Outcome", style="bold", no_wrap=True)
    table.add_column("Description")
    table.add_column("Status", no_wrap=True)
    table.add_column("Details", overflow="fold")
    for outcome in response.outcomes:
        tag = next(iter(outcome.tags.status), None)
        status = f"[{_LEVEL_STYLES[tag.level]}]{tag.label}[/]" if tag else ""
        table.add_row(outcome.outcome_id, outcome.description, status, outcome.body)
    console.print(table)

    style = "bold green" if response.status == TaskStatus.PASSED else "bold red"
    console.print(response.message, style=style)
    if response.url:
        console.print(f"URL: {response.url}")
