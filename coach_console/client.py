"""
CoachClient - REST client for the coach service.

Every call raises TransportFailure for connection-level problems and
RemoteRejection (carrying the response body text) for non-success statuses.
fetch_health is the exception: it never raises.

Endpoints:
    GET  /history?days=N
    GET  /health
    GET  /hooks
    PUT  /hooks/{id}
    POST /hooks/{id}/trigger
    GET  /hooks/{id}/context
    GET  /hook-results
    POST /hook-results/{id}/read
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from coach_console.config import DEFAULT_BASE_URL, DEFAULT_HTTP_TIMEOUT
from coach_console.errors import RemoteRejection, TransportFailure
from coach_console.models import FocusRecord, HookDefinition, HookResult, ScheduleWindow

logger = logging.getLogger(__name__)


class CoachClient:
    """Async client for the coach service's pull endpoints."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise TransportFailure(f"{method} {path}: {e}") from e

        if not response.is_success:
            logger.warning(f"{method} {path} rejected: HTTP {response.status_code}")
            raise RemoteRejection(response.status_code, response.text)
        return response

    async def _get_json(self, path: str, **kwargs: Any) -> Any:
        response = await self._request("GET", path, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise RemoteRejection(response.status_code, f"Invalid JSON from {path}") from e

    @staticmethod
    def _parse_list(model: type, data: Any, path: str) -> list:
        if data is None:
            return []
        if not isinstance(data, list):
            raise RemoteRejection(200, f"Expected a list from {path}")
        try:
            return [model.model_validate(item) for item in data]
        except ValidationError as e:
            raise RemoteRejection(200, f"Unexpected payload from {path}: {e}") from e

    async def fetch_history(self, days: int = 7) -> list[FocusRecord]:
        data = await self._get_json("/history", params={"days": days})
        return self._parse_list(FocusRecord, data, "/history")

    async def fetch_health(self) -> bool:
        """True only for a success status. Never raises."""
        try:
            response = await self._http.get("/health")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Health check failed: {e!r}")
            return False
        return response.is_success

    async def fetch_hooks(self) -> list[HookDefinition]:
        data = await self._get_json("/hooks")
        return self._parse_list(HookDefinition, data, "/hooks")

    async def update_hook_config(self, hook_id: str, window: ScheduleWindow) -> None:
        await self._request("PUT", f"/hooks/{hook_id}", json=window.to_wire())

    async def trigger_hook(self, hook_id: str) -> None:
        await self._request("POST", f"/hooks/{hook_id}/trigger")

    async def fetch_hook_context(self, hook_id: str) -> str:
        data = await self._get_json(f"/hooks/{hook_id}/context")
        if not isinstance(data, dict) or not isinstance(data.get("context"), str):
            raise RemoteRejection(200, "Context response missing 'context'")
        return data["context"]

    async def fetch_hook_results(self) -> list[HookResult]:
        data = await self._get_json("/hook-results")
        return self._parse_list(HookResult, data, "/hook-results")

    async def mark_result_read(self, result_id: str) -> None:
        await self._request("POST", f"/hook-results/{result_id}/read")

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "CoachClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
