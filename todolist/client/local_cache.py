"""Client-side fallback store for todos, used while the API is unreachable.

The cache file is a JSON object mapping keys to serialized values, the same
shape a browser's local storage has. The task list lives under a single key
as one JSON array. Every operation reads the whole list, changes it in memory
and writes the whole list back.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

CACHE_KEY = "todo_app_tasks"


def _atomic_write(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    data = json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")
    with open(tmp_path, "wb") as handle:
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
    os.replace(tmp_path, path)


def _same_id(left: Any, right: Any) -> bool:
    # Offline ids are strings, server ids are ints.
    return str(left) == str(right)


def new_local_id(taken: Iterable[Any] = ()) -> str:
    """Millisecond timestamp id, bumped past any id already in use."""

    used = {str(value) for value in taken}
    candidate = int(time.time() * 1000)
    while str(candidate) in used:
        candidate += 1
    return str(candidate)


class KeyValueFile:
    """A tiny durable string key/value store backed by one JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._load()
        except (OSError, ValueError):
            data = {}
        data[key] = value
        _atomic_write(self.path, data)


class LocalCache:
    def __init__(self, storage: KeyValueFile, key: str = CACHE_KEY) -> None:
        self.storage = storage
        self.key = key

    @classmethod
    def at(cls, path: str | Path) -> "LocalCache":
        return cls(KeyValueFile(Path(path)))

    def get_all(self) -> List[Dict[str, Any]]:
        """Return the cached list; unreadable or corrupt data reads as empty."""

        try:
            raw = self.storage.get_item(self.key)
            todos = json.loads(raw) if raw else []
        except (OSError, ValueError, TypeError):
            logger.exception("could not read local cache", extra={"source": "cache"})
            return []
        if not isinstance(todos, list):
            return []
        return [todo for todo in todos if isinstance(todo, dict)]

    def _write(self, todos: List[Dict[str, Any]]) -> None:
        try:
            self.storage.set_item(self.key, json.dumps(todos, ensure_ascii=False))
        except (OSError, TypeError, ValueError):
            logger.exception("could not write local cache", extra={"source": "cache"})

    def _mutate(self, change: Callable[[List[Dict[str, Any]]], List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        todos = change(self.get_all())
        self._write(todos)
        return todos

    def append(self, todo: Dict[str, Any]) -> Dict[str, Any]:
        record = dict(todo)
        record.setdefault("completed", False)
        record.setdefault("created_at", dt.datetime.now(dt.timezone.utc).isoformat())

        def change(todos: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            if record.get("id") is None:
                record["id"] = new_local_id(item.get("id") for item in todos)
            return todos + [record]

        self._mutate(change)
        return record

    def _set_field(self, todo_id: Any, field: str, value: Any) -> Optional[Dict[str, Any]]:
        found: List[Dict[str, Any]] = []

        def change(todos: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
            for todo in todos:
                if _same_id(todo.get("id"), todo_id):
                    todo[field] = value
                    found.append(todo)
                    break
            return todos

        self._mutate(change)
        return found[0] if found else None

    def toggle(self, todo_id: Any, completed: bool) -> Optional[Dict[str, Any]]:
        return self._set_field(todo_id, "completed", bool(completed))

    def update_text(self, todo_id: Any, text: str) -> Optional[Dict[str, Any]]:
        return self._set_field(todo_id, "text", text)

    def remove(self, todo_id: Any) -> List[Dict[str, Any]]:
        return self._mutate(
            lambda todos: [todo for todo in todos if not _same_id(todo.get("id"), todo_id)]
        )

    def remove_completed(self) -> List[Dict[str, Any]]:
        return self._mutate(lambda todos: [todo for todo in todos if not todo.get("completed")])
