"""Dependency providers wiring the todo store and service into the routers."""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from todolist.adapters.todo_repository_sql import SQLAlchemyTodoRepository
from todolist.app.db import StoreStatus, get_db
from todolist.app.services.todo_service import TodoService
from todolist.ports.todo_repository import ITodoRepository


def get_todo_repository(db: Session = Depends(get_db)) -> ITodoRepository:
    return SQLAlchemyTodoRepository(db)


def get_store_status(request: Request) -> StoreStatus:
    """Return the latest probe result kept by the app's store monitor."""
    return request.app.state.store_monitor.current()


def get_todo_service(
    repo: ITodoRepository = Depends(get_todo_repository),
    status: StoreStatus = Depends(get_store_status),
) -> TodoService:
    return TodoService(repo, status)
