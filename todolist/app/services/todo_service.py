"""Task service: validates input and translates operations into store calls.

Validation and not-found checks happen before any mutating store call. Store
faults arrive as ``StoreError`` and leave this module as ``InternalError``.
When the last reachability probe says the store is down, every operation
raises ``ServiceUnavailableError`` before touching it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from todolist.app.core.errors import (
    InternalError,
    InvalidTodoError,
    ServiceUnavailableError,
    StoreError,
    TodoNotFoundError,
)
from todolist.app.db import StoreStatus
from todolist.ports.todo_repository import ITodoRepository

logger = logging.getLogger(__name__)


def normalize_text(value: Any) -> str:
    """Return trimmed task text, rejecting missing, non-string or blank values."""

    if not isinstance(value, str):
        raise InvalidTodoError("todo text is required")
    text = value.strip()
    if not text:
        raise InvalidTodoError("todo text must not be empty")
    return text


@dataclass(frozen=True)
class TodoPatch:
    """Partial update request; ``None`` means the field was not supplied."""

    text: Optional[str] = None
    completed: Optional[bool] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TodoPatch":
        return cls(text=payload.get("text"), completed=payload.get("completed"))

    def changes(self) -> dict[str, Any]:
        """Validate the patch and return the store-ready field map."""

        changes: dict[str, Any] = {}
        if self.text is not None:
            changes["text"] = normalize_text(self.text)
        if self.completed is not None:
            changes["completed"] = bool(self.completed)
        if not changes:
            raise InvalidTodoError("no fields to update")
        return changes


class TodoService:
    def __init__(self, repo: ITodoRepository, status: StoreStatus) -> None:
        self.repo = repo
        self.status = status

    def _ensure_available(self, op: str) -> None:
        if not self.status.connected:
            logger.warning("store unavailable, rejecting request", extra={"op": op})
            raise ServiceUnavailableError("todo store is unavailable")

    def list_todos(self) -> list[dict[str, Any]]:
        self._ensure_available("list")
        try:
            return self.repo.list()
        except StoreError as exc:
            raise InternalError("could not load todos", cause=exc) from exc

    def create_todo(self, text: Any, completed: bool = False) -> dict[str, Any]:
        self._ensure_available("create")
        clean = normalize_text(text)
        try:
            todo = self.repo.create(clean, completed=bool(completed))
        except StoreError as exc:
            raise InternalError("could not create todo", cause=exc) from exc
        logger.info("created todo", extra={"op": "create", "todo_id": todo["id"]})
        return todo

    def update_todo(self, todo_id: int, patch: TodoPatch) -> dict[str, Any]:
        self._ensure_available("update")
        try:
            if self.repo.get(todo_id) is None:
                raise TodoNotFoundError(f"todo {todo_id} not found")
            changes = patch.changes()
            todo = self.repo.update(todo_id, changes)
        except StoreError as exc:
            raise InternalError("could not update todo", cause=exc) from exc
        if todo is None:
            # Deleted between the existence check and the update.
            raise TodoNotFoundError(f"todo {todo_id} not found")
        logger.info(
            "updated todo fields=%s",
            ",".join(sorted(changes)),
            extra={"op": "update", "todo_id": todo_id},
        )
        return todo

    def delete_todo(self, todo_id: int) -> dict[str, Any]:
        self._ensure_available("delete")
        try:
            deleted = self.repo.delete(todo_id)
        except StoreError as exc:
            raise InternalError("could not delete todo", cause=exc) from exc
        if deleted is None:
            raise TodoNotFoundError(f"todo {todo_id} not found")
        logger.info("deleted todo", extra={"op": "delete", "todo_id": todo_id})
        return deleted

    def clear_completed(self) -> list[dict[str, Any]]:
        """Delete completed todos and return the survivors read just before the delete.

        The read and the delete are separate statements; a todo created or
        completed between them may be missing from the result or escape the
        delete.
        """

        self._ensure_available("clear_completed")
        try:
            survivors = self.repo.list(completed=False)
            removed = self.repo.delete_completed()
        except StoreError as exc:
            raise InternalError("could not clear completed todos", cause=exc) from exc
        logger.info(
            "cleared %d completed todos, %d remain",
            removed,
            len(survivors),
            extra={"op": "clear_completed"},
        )
        return survivors
