"""View model for the todo list: filtering, ordering and aggregate counts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple


class TodoFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


def _parse_created_at(value: Any) -> datetime | None:
    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            parsed = datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OSError, OverflowError, ValueError):
            return None
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
    if parsed is not None and parsed.tzinfo is None:
        # The store keeps naive UTC timestamps.
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _id_rank(value: Any) -> int:
    # Server ids are ints, offline ids are digit strings; both order by value.
    try:
        return int(str(value))
    except ValueError:
        return -1


def sort_todos_by_created(todos: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Return todos newest first (ties: higher id first), tolerating malformed timestamps."""

    def sort_key(item: Dict[str, Any]) -> Tuple[datetime, int]:
        parsed = _parse_created_at(item.get("created_at"))
        return parsed or datetime.min.replace(tzinfo=timezone.utc), _id_rank(item.get("id"))

    return sorted(list(todos or []), key=sort_key, reverse=True)


def matches_filter(todo: Dict[str, Any], todo_filter: TodoFilter) -> bool:
    if todo_filter is TodoFilter.ACTIVE:
        return not todo.get("completed")
    if todo_filter is TodoFilter.COMPLETED:
        return bool(todo.get("completed"))
    return True


@dataclass(frozen=True)
class TodoView:
    todo_filter: TodoFilter
    items: List[Dict[str, Any]]
    pending_count: int
    completed_count: int
    total: int

    @property
    def has_completed(self) -> bool:
        return self.completed_count > 0

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def pending_label(self) -> str:
        noun = "task" if self.pending_count == 1 else "tasks"
        return f"{self.pending_count} {noun} pending"


def build_view(todos: Iterable[Dict[str, Any]], todo_filter: TodoFilter = TodoFilter.ALL) -> TodoView:
    """Filter for display; counts always come from the full, unfiltered list."""

    ordered = sort_todos_by_created(todos)
    pending = sum(1 for todo in ordered if not todo.get("completed"))
    return TodoView(
        todo_filter=todo_filter,
        items=[todo for todo in ordered if matches_filter(todo, todo_filter)],
        pending_count=pending,
        completed_count=len(ordered) - pending,
        total=len(ordered),
    )


def render_lines(view: TodoView) -> List[str]:
    lines: List[str] = []
    if view.is_empty:
        lines.append("  (nothing to show)")
    for todo in view.items:
        mark = "x" if todo.get("completed") else " "
        lines.append(f"  [{mark}] {todo.get('text', '')}  #{todo.get('id')}")
    footer = view.pending_label
    if view.has_completed:
        footer += f" | {view.completed_count} completed (clear with 'todolist clear')"
    lines.append(footer)
    return lines
