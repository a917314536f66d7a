"""Todo REST API router."""

import logging

from fastapi import APIRouter, Depends, HTTPException

from todolist.app.core.errors import ServiceUnavailableError, TodoError
from todolist.app.deps import get_todo_service
from todolist.app.schemas import TodoCreate, TodoDeleted, TodoOut, TodoUpdate
from todolist.app.services.todo_service import TodoPatch, TodoService

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api/todos", tags=["todos"])


def _http_error(exc: TodoError) -> HTTPException:
    if exc.status_code >= 500:
        logger.error("todo request failed: %s", exc.message, extra={"op": exc.code})
    return HTTPException(
        status_code=exc.status_code,
        detail={
            "error": exc.message,
            "code": exc.code,
            "use_local_cache": isinstance(exc, ServiceUnavailableError),
        },
    )


@api_router.get("", response_model=list[TodoOut])
def list_todos(service: TodoService = Depends(get_todo_service)):
    """Return every todo, newest first."""

    try:
        return service.list_todos()
    except TodoError as exc:
        raise _http_error(exc) from exc


@api_router.post("", response_model=TodoOut, status_code=201)
def create_todo(payload: TodoCreate, service: TodoService = Depends(get_todo_service)):
    try:
        return service.create_todo(payload.text, completed=payload.completed)
    except TodoError as exc:
        raise _http_error(exc) from exc


# Registered before /{todo_id} so the literal path wins.
@api_router.delete("/clear-completed", response_model=list[TodoOut])
def clear_completed(service: TodoService = Depends(get_todo_service)):
    """Delete completed todos and return the remaining ones."""

    try:
        return service.clear_completed()
    except TodoError as exc:
        raise _http_error(exc) from exc


@api_router.patch("/{todo_id}", response_model=TodoOut)
def update_todo(
    todo_id: int,
    payload: TodoUpdate,
    service: TodoService = Depends(get_todo_service),
):
    patch = TodoPatch.from_payload(payload.model_dump(exclude_unset=True))
    try:
        return service.update_todo(todo_id, patch)
    except TodoError as exc:
        raise _http_error(exc) from exc


@api_router.delete("/{todo_id}", response_model=TodoDeleted)
def delete_todo(todo_id: int, service: TodoService = Depends(get_todo_service)):
    try:
        deleted = service.delete_todo(todo_id)
    except TodoError as exc:
        raise _http_error(exc) from exc
    return {"ok": True, "message": "Todo deleted", "id": todo_id, "todo": deleted}


router = api_router

__all__ = ["api_router", "router"]
