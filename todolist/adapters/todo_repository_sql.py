"""SQLAlchemy-backed todo store."""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from todolist.app.core.errors import StoreError
from todolist.app.models import Todo
from todolist.ports.todo_repository import ITodoRepository

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = ("text", "completed")

# INTEGER primary keys are int4 on Postgres; anything outside cannot exist.
MAX_TODO_ID = 2**31 - 1


def _valid_id(todo_id: int) -> bool:
    return 1 <= todo_id <= MAX_TODO_ID


def todo_to_dict(todo: Todo) -> dict[str, Any]:
    return {
        "id": todo.id,
        "text": todo.text,
        "completed": bool(todo.completed),
        "created_at": todo.created_at,
    }


class SQLAlchemyTodoRepository(ITodoRepository):
    def __init__(self, session: Session):
        self.session = session

    def _fail(self, op: str, exc: SQLAlchemyError) -> StoreError:
        self.session.rollback()
        logger.exception("store %s failed", op, extra={"op": op})
        return StoreError(f"store {op} failed", cause=exc)

    def list(self, completed: Optional[bool] = None) -> list[dict[str, Any]]:
        try:
            query = self.session.query(Todo)
            if completed is not None:
                query = query.filter(Todo.completed == completed)
            rows = query.order_by(Todo.created_at.desc(), Todo.id.desc()).all()
            return [todo_to_dict(row) for row in rows]
        except SQLAlchemyError as exc:
            raise self._fail("list", exc) from exc

    def get(self, todo_id: int) -> Optional[dict[str, Any]]:
        if not _valid_id(todo_id):
            return None
        try:
            todo = self.session.query(Todo).filter(Todo.id == todo_id).first()
        except SQLAlchemyError as exc:
            raise self._fail("get", exc) from exc
        return todo_to_dict(todo) if todo else None

    def create(self, text: str, completed: bool = False) -> dict[str, Any]:
        try:
            todo = Todo(text=text, completed=completed)
            self.session.add(todo)
            self.session.commit()
            self.session.refresh(todo)
            return todo_to_dict(todo)
        except SQLAlchemyError as exc:
            raise self._fail("create", exc) from exc

    def update(self, todo_id: int, changes: dict[str, Any]) -> Optional[dict[str, Any]]:
        if not _valid_id(todo_id):
            return None
        try:
            todo = self.session.query(Todo).filter(Todo.id == todo_id).first()
            if todo is None:
                return None
            for key in _UPDATABLE_FIELDS:
                if key in changes:
                    setattr(todo, key, changes[key])
            self.session.commit()
            self.session.refresh(todo)
            return todo_to_dict(todo)
        except SQLAlchemyError as exc:
            raise self._fail("update", exc) from exc

    def delete(self, todo_id: int) -> Optional[dict[str, Any]]:
        if not _valid_id(todo_id):
            return None
        try:
            todo = self.session.query(Todo).filter(Todo.id == todo_id).first()
            if todo is None:
                return None
            deleted = todo_to_dict(todo)
            self.session.delete(todo)
            self.session.commit()
            return deleted
        except SQLAlchemyError as exc:
            raise self._fail("delete", exc) from exc

    def delete_completed(self) -> int:
        try:
            count = (
                self.session.query(Todo)
                .filter(Todo.completed == True)  # noqa: E712
                .delete(synchronize_session=False)
            )
            self.session.commit()
            return int(count or 0)
        except SQLAlchemyError as exc:
            raise self._fail("delete_completed", exc) from exc
