"""FastAPI application exposing the run task endpoint."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from tfruntask import __version__
from tfruntask.domain.exceptions import (
    PlatformAPIError,
    SignatureRejected,
    StageExecutionError,
    UnknownStageError,
)
from tfruntask.domain.models.task_request import TaskRequest
from tfruntask.infrastructure.containers import Container, get_container
from tfruntask.infrastructure.security.signature import SIGNATURE_HEADER, authenticate_request

logger = structlog.get_logger(__name__)


def create_app(container: Container | None = None) -> FastAPI:
    """Build the application.

    Args:
        container: Container providing settings and services, a default one
            reading the environment is created if omitted

    Returns:
        The FastAPI application with the run task route mounted at ``settings.path``
    """
    container = container or get_container()
    settings = container.settings()

    if not settings.hmac_key:
        logger.warning("No HMAC key configured, requests are accepted without signature checks")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Run task server started", path=settings.path)
        yield
        await container.platform_client().close()
        logger.info("Run task server stopped")

    app = FastAPI(title="tfruntask", version=__version__, lifespan=lifespan)
    app.state.container = container

    async def run_task(request: Request) -> Response:
        """Handle a run task request sent by HCP Terraform.

        - Apply the signature policy to the raw body
        - Decode the request, 400 if it is not a valid run task request
        - Answer endpoint validation requests with 200 right away
        - Run the stage and PATCH the task result to the callback URL
        """
        body = await request.body()
        try:
            authenticate_request(body, request.headers.get(SIGNATURE_HEADER), settings.hmac_key)
        except SignatureRejected as e:
            return PlainTextResponse(e.detail, status_code=e.status_code)

        try:
            task_request = TaskRequest.model_validate_json(body)
        except ValidationError as e:
            logger.warning("Failed to decode run task request", error_count=e.error_count())
            return PlainTextResponse("Bad Request", status_code=status.HTTP_400_BAD_REQUEST)

        if task_request.is_endpoint_validation():
            logger.info("Received endpoint validation request")
            return Response(status_code=status.HTTP_200_OK)

        structlog.contextvars.bind_contextvars(run_id=task_request.run_id, stage=task_request.stage)
        try:
            await container.run_task_service().process(task_request)
        except UnknownStageError as e:
            return PlainTextResponse(f"Bad Request: {e}", status_code=status.HTTP_400_BAD_REQUEST)
        except StageExecutionError as e:
            logger.error("Stage execution failed", error=str(e))
            return PlainTextResponse(
                f"Error during stage execution: {e}",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        except PlatformAPIError as e:
            logger.error("Failed to send task result", error=str(e), status_code=e.status_code)
            return PlainTextResponse(
                f"Failed to send task result: {e}",
                status_code=status.HTTP_502_BAD_GATEWAY,
            )
        finally:
            structlog.contextvars.unbind_contextvars("run_id", "stage")

        return Response(status_code=status.HTTP_200_OK)

    app.add_api_route(settings.path, run_task, methods=["POST"], name="run_task")

    @app.get("/healthcheck")
    async def healthcheck() -> dict[str, str]:
        return {"status": "available"}

    return app
