"""Port interface for task persistence (store boundary)."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ITodoRepository(Protocol):
    """Todo store abstraction: full scan, insert, partial update, delete by id or predicate.

    Every method raises ``StoreError`` on any store fault.
    """

    def list(self, completed: Optional[bool] = None) -> list[dict[str, Any]]:
        """Return todos newest first, optionally only those with the given completion flag."""

    def get(self, todo_id: int) -> Optional[dict[str, Any]]:
        """Return a todo by id or None when missing."""

    def create(self, text: str, completed: bool = False) -> dict[str, Any]:
        """Insert a todo; the store assigns id and created_at."""

    def update(self, todo_id: int, changes: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Apply only the given fields and return the stored todo, or None when missing."""

    def delete(self, todo_id: int) -> Optional[dict[str, Any]]:
        """Delete a todo and return the deleted record, or None when missing."""

    def delete_completed(self) -> int:
        """Delete every completed todo and return how many rows went away."""
