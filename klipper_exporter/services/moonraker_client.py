"""Moonraker HTTP API client."""

import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

PROCESS_STATS_PATH = "/machine/proc_stats"
DIRECTORY_INFO_PATH = "/server/files/directory"
JOB_QUEUE_PATH = "/server/job_queue/status"
SYSTEM_INFO_PATH = "/machine/system_info"
TEMPERATURE_STORE_PATH = "/server/temperature_store"

API_KEY_HEADER = "X-Api-Key"

M = TypeVar('M', bound=BaseModel)


class MoonrakerAPIError(Exception):
    """Raised when a Moonraker endpoint cannot be queried or decoded."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class MoonrakerClient:
    """
    Client for the Moonraker JSON API of a single printer host.

    One instance serves one collection cycle. Requests share a single
    httpx.AsyncClient that is closed with the client. The API key header
    is attached to each request. Nothing is retried or cached.
    """

    def __init__(
        self,
        target: str,
        api_key: str = "",
        timeout: Optional[float] = None,
        logger: logging.Logger = None
    ):
        """
        Initialize Moonraker client.

        Args:
            target: Host (and optional port) of the Moonraker instance
            api_key: Moonraker API key, sent only when non-empty
            timeout: Request timeout in seconds, None to wait indefinitely
            logger: Optional logger instance
        """
        self.target = target
        self.base_url = self._base_url(target)
        self.api_key = api_key
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._client: Optional[httpx.AsyncClient] = None

    @staticmethod
    def _base_url(target: str) -> str:
        if target.startswith(('http://', 'https://')):
            return target.rstrip('/')
        return f"http://{target}".rstrip('/')

    @property
    def headers(self) -> Dict[str, str]:
        if self.api_key:
            return {API_KEY_HEADER: self.api_key}
        return {}

    async def __aenter__(self) -> "MoonrakerClient":
        self._client = httpx.AsyncClient(timeout=self.timeout)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(
        self,
        path: str,
        model: Optional[Type[M]] = None,
        params: Optional[Dict[str, str]] = None
    ) -> Any:
        """
        GET an endpoint and decode its "result" envelope.

        Args:
            path: Endpoint path, e.g. "/machine/proc_stats"
            model: Pydantic model to validate the result against; when None
                the result is returned as decoded JSON
            params: Optional query parameters

        Returns:
            The validated model instance, or the raw result

        Raises:
            MoonrakerAPIError: On transport failure, non-200 status,
                undecodable body, unexpected payload shape
                or an API key that cannot be sent as a header
        """
        url = f"{self.base_url}{path}"
        if self._client is None:
            raise RuntimeError("MoonrakerClient must be used as an async context manager")

        try:
            headers = httpx.Headers(self.headers)
        except UnicodeEncodeError as e:
            raise MoonrakerAPIError(f"API key for {url} is not valid ASCII", url) from e

        self.logger.debug(f"Fetching {url}")
        try:
            response = await self._client.get(url, params=params, headers=headers)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise MoonrakerAPIError(f"Request to {url} failed: {e}", url) from e

        if response.status_code != 200:
            raise MoonrakerAPIError(
                f"HTTP {response.status_code} from {url}",
                url,
                status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MoonrakerAPIError(f"Invalid JSON from {url}: {e}", url, response.status_code) from e

        if not isinstance(payload, dict) or "result" not in payload:
            raise MoonrakerAPIError(f"Missing 'result' in response from {url}", url, response.status_code)

        result = payload["result"]
        if model is None:
            return result

        try:
            return model.model_validate(result)
        except ValidationError as e:
            raise MoonrakerAPIError(
                f"Unexpected response shape from {url}: {e.error_count()} validation error(s)",
                url,
                response.status_code
            ) from e
