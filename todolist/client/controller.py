"""Client controller: talks to the todo API and falls back to the local cache.

Each operation is tried against the API first. A transport fault or any
non-success status sends that one operation to the local cache instead, and
the view is rebuilt from whichever side answered. There is no sticky offline
mode: the next operation tries the API again.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from todolist.client.api_client import TodoApiClient, TodoApiError
from todolist.client.local_cache import LocalCache
from todolist.client.view import TodoFilter, TodoView, build_view, sort_todos_by_created

logger = logging.getLogger(__name__)

CONFIRM_DELETE = "Are you sure you want to delete this task?"
CONFIRM_CLEAR = "Are you sure you want to delete all completed tasks?"


class BackendStatus(str, Enum):
    CONNECTED = "connected"
    OFFLINE = "offline"


class Source(str, Enum):
    SERVICE = "service"
    CACHE = "cache"


def _same_id(left: Any, right: Any) -> bool:
    return str(left) == str(right)


class TodoController:
    def __init__(
        self,
        api: TodoApiClient,
        cache: LocalCache,
        *,
        confirm: Callable[[str], bool],
    ) -> None:
        self.api = api
        self.cache = cache
        self.confirm = confirm
        self.todo_filter = TodoFilter.ALL
        self.todos: List[Dict[str, Any]] = []
        self.backend_status: Optional[BackendStatus] = None
        # Informational only; never consulted when choosing where to send a request.
        self.last_source: Optional[Source] = None

    @property
    def view(self) -> TodoView:
        return build_view(self.todos, self.todo_filter)

    def _show(self, todos: List[Dict[str, Any]], source: Source) -> TodoView:
        self.todos = sort_todos_by_created(todos)
        self.last_source = source
        return self.view

    def _fall_back(self, op: str, exc: TodoApiError, todo_id: Any = None) -> None:
        logger.warning(
            "%s failed, using local cache: %s",
            op,
            exc.message,
            extra={"op": op, "todo_id": todo_id if todo_id is not None else "-", "source": "cache"},
        )

    def _replace(self, updated: Dict[str, Any]) -> List[Dict[str, Any]]:
        todos = [todo for todo in self.todos if not _same_id(todo.get("id"), updated.get("id"))]
        return todos + [updated]

    async def check_connection(self) -> BackendStatus:
        """Probe the API health route; the result is for display and never gates operations."""

        try:
            data = await self.api.health()
        except TodoApiError as exc:
            logger.warning("backend unreachable: %s", exc.message, extra={"op": "health"})
            self.backend_status = BackendStatus.OFFLINE
            return self.backend_status
        logger.info("backend connected database=%s", data.get("database"), extra={"op": "health"})
        self.backend_status = BackendStatus.CONNECTED
        return self.backend_status

    async def load(self) -> TodoView:
        try:
            todos = await self.api.list_todos()
        except TodoApiError as exc:
            self._fall_back("list", exc)
            return self._show(self.cache.get_all(), Source.CACHE)
        return self._show(todos, Source.SERVICE)

    async def set_filter(self, todo_filter: TodoFilter | str) -> TodoView:
        self.todo_filter = TodoFilter(todo_filter)
        return await self.load()

    async def add(self, text: str) -> TodoView:
        clean = (text or "").strip()
        if not clean:
            return self.view
        try:
            created = await self.api.create_todo(clean)
        except TodoApiError as exc:
            self._fall_back("create", exc)
            self.cache.append({"text": clean, "completed": False})
            return self._show(self.cache.get_all(), Source.CACHE)
        return self._show(self._replace(created), Source.SERVICE)

    async def toggle(self, todo_id: Any, completed: bool) -> TodoView:
        try:
            updated = await self.api.update_todo(todo_id, completed=bool(completed))
        except TodoApiError as exc:
            self._fall_back("toggle", exc, todo_id)
            self.cache.toggle(todo_id, completed)
            return self._show(self.cache.get_all(), Source.CACHE)
        return self._show(self._replace(updated), Source.SERVICE)

    async def edit(self, todo_id: Any, text: str) -> TodoView:
        clean = (text or "").strip()
        if not clean:
            return self.view
        try:
            updated = await self.api.update_todo(todo_id, text=clean)
        except TodoApiError as exc:
            self._fall_back("edit", exc, todo_id)
            self.cache.update_text(todo_id, clean)
            return self._show(self.cache.get_all(), Source.CACHE)
        return self._show(self._replace(updated), Source.SERVICE)

    async def delete(self, todo_id: Any) -> TodoView:
        if not self.confirm(CONFIRM_DELETE):
            return self.view
        try:
            await self.api.delete_todo(todo_id)
        except TodoApiError as exc:
            self._fall_back("delete", exc, todo_id)
            return self._show(self.cache.remove(todo_id), Source.CACHE)
        remaining = [todo for todo in self.todos if not _same_id(todo.get("id"), todo_id)]
        return self._show(remaining, Source.SERVICE)

    async def clear_completed(self) -> TodoView:
        if not self.confirm(CONFIRM_CLEAR):
            return self.view
        try:
            remaining = await self.api.clear_completed()
        except TodoApiError as exc:
            self._fall_back("clear_completed", exc)
            return self._show(self.cache.remove_completed(), Source.CACHE)
        return self._show(remaining, Source.SERVICE)
