"""HCP Terraform API client used while running a stage."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import structlog

from tfruntask.domain.exceptions import PlatformAPIError
from tfruntask.domain.models.task_request import TaskRequest, path_segment
from tfruntask.domain.models.task_response import JSON_API_MEDIA_TYPE, TaskResponse
from tfruntask.domain.ports.platform import PlatformDataProvider
from tfruntask.infrastructure.platform.files import FileManager

logger = structlog.get_logger(__name__)


class PlatformClient(PlatformDataProvider):
    """HCP Terraform implementation of PlatformDataProvider.

    Two tokens are involved: the ``access_token`` of each request, which can
    download the configuration version and plan JSON and post the task result,
    and an optional ``api_token`` with permission to read runs, needed for the
    ``/api/v2/runs`` endpoints. Without ``api_token`` those downloads are skipped.
    """

    def __init__(
        self,
        file_manager: FileManager,
        api_token: str | None = None,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._file_manager = file_manager
        self._api_token = api_token or None
        self._timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def has_api_token(self) -> bool:
        return self._api_token is not None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    @staticmethod
    def _headers(token: str | None) -> dict[str, str]:
        headers = {"Content-Type": JSON_API_MEDIA_TYPE}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self,
        method: str,
        url: str,
        token: str | None,
        content: bytes | None = None,
    ) -> httpx.Response:
        client = await self._get_client()
        try:
            resp = await client.request(method, url, headers=self._headers(token), content=content)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise PlatformAPIError(f"failed to send request: {e}") from e

        if not resp.is_success:
            logger.warning(
                "Unexpected response from platform",
                method=method,
                status_code=resp.status_code,
                response_text=resp.text[:200] if resp.text else None,
            )
            raise PlatformAPIError(
                f"unexpected status code: {resp.status_code}", status_code=resp.status_code
            )
        return resp

    async def _download(self, url: str, path: Path, token: str | None) -> None:
        client = await self._get_client()
        try:
            async with client.stream("GET", url, headers=self._headers(token)) as resp:
                if not resp.is_success:
                    raise PlatformAPIError(
                        f"unexpected status code: {resp.status_code}", status_code=resp.status_code
                    )
                with path.open("wb") as out:
                    async for chunk in resp.aiter_bytes():
                        out.write(chunk)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise PlatformAPIError(f"failed to download {path.name}: {e}") from e

    async def download_configuration_version(self, directory: Path, request: TaskRequest) -> None:
        cv_id = request.configuration_version_id
        if not cv_id or not request.configuration_version_download_url:
            raise PlatformAPIError("request has no configuration version to download")

        path_segment(cv_id, "configuration_version_id")
        archive = directory / f"{cv_id}.tar.gz"
        await self._download(request.configuration_version_download_url, archive, request.access_token)
        self._file_manager.extract_tar_gz(archive, directory / cv_id)
        logger.debug("Downloaded configuration version", configuration_version_id=cv_id)

    async def download_plan_json(self, directory: Path, request: TaskRequest) -> None:
        if not request.plan_json_api_url:
            raise PlatformAPIError("request has no plan JSON URL")

        resp = await self._request("GET", request.plan_json_api_url, request.access_token)
        self._file_manager.save_pretty_json(resp.content, directory / "plan_json.json")

    async def get_data_from_api(self, directory: Path, data_type: str, request: TaskRequest) -> bool:
        if not self.has_api_token:
            logger.debug("API token not set, skipping download", data_type=data_type)
            return False

        hostname = request.hostname
        if not hostname:
            raise PlatformAPIError("cannot determine the platform hostname from the callback URL")

        # The run itself has no sub-path.
        url = f"{hostname}/api/v2/runs/{request.run_id}"
        if data_type != "run":
            url = f"{url}/{data_type}"

        resp = await self._request("GET", url, self._api_token)
        self._file_manager.save_pretty_json(resp.content, directory / f"{data_type}_api.json")
        return True

    async def get_logs(self, directory: Path, log_type: str) -> bool:
        api_file = directory / f"{log_type}_api.json"
        if not api_file.exists():
            logger.debug("No API document for logs, skipping", log_type=log_type)
            return False

        log_url = self._extract_log_url(api_file)
        # The log URL embeds its own short lived token.
        await self._download(log_url, directory / f"{log_type}_logs.txt", token=None)
        return True

    @staticmethod
    def _extract_log_url(api_file: Path) -> str:
        try:
            document: Any = json.loads(api_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise PlatformAPIError(f"failed to parse {api_file.name}: {e}") from e

        log_url = None
        if isinstance(document, dict):
            data = document.get("data")
            attributes = data.get("attributes") if isinstance(data, dict) else None
            if isinstance(attributes, dict):
                log_url = attributes.get("log-read-url")

        if not log_url or not isinstance(log_url, str):
            raise PlatformAPIError(f"log-read-url not found in {api_file.name}")
        return log_url

    async def send_task_result(self, request: TaskRequest, response: TaskResponse) -> None:
        if not request.task_result_callback_url:
            raise PlatformAPIError("request has no task result callback URL")

        await self._request(
            "PATCH",
            request.task_result_callback_url,
            request.access_token,
            content=response.to_json().encode("utf-8"),
        )
        logger.info(
            "Sent task result",
            run_id=request.run_id,
            status=response.status.value if response.status else None,
            outcomes=len(response.outcomes),
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
