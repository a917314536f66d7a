"""Async HTTP client for the todo REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class TodoApiError(Exception):
    """Raised for transport faults (status_code None) and non-success responses."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class TodoApiClient:
    """Thin wrapper over ``httpx.AsyncClient``; no retries, transport default timeouts."""

    def __init__(self, base_url: str, *, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "TodoApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise TodoApiError(f"{method} {path} failed: {exc}") from exc

        if not response.is_success:
            try:
                detail = response.json()
            except ValueError:
                detail = response.text
            raise TodoApiError(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                detail=detail,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise TodoApiError(
                f"{method} {path} returned invalid json",
                status_code=response.status_code,
            ) from exc

    async def health(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/health")

    async def list_todos(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/todos")

    async def create_todo(self, text: str, completed: bool = False) -> Dict[str, Any]:
        return await self._request("POST", "/api/todos", json={"text": text, "completed": completed})

    async def update_todo(self, todo_id: Any, **fields: Any) -> Dict[str, Any]:
        return await self._request("PATCH", f"/api/todos/{todo_id}", json=fields)

    async def delete_todo(self, todo_id: Any) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/todos/{todo_id}")

    async def clear_completed(self) -> List[Dict[str, Any]]:
        return await self._request("DELETE", "/api/todos/clear-completed")
