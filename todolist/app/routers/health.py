"""Health and table bootstrap routes."""

import datetime as dt
import logging

from fastapi import APIRouter, HTTPException, Request

from todolist.app.config import get_settings
from todolist.app.core.errors import StoreError
from todolist.app.db import ensure_todos_table
from todolist.app.schemas import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])
init_db_router = APIRouter(prefix="/api", tags=["admin"])


@router.get("/health", response_model=HealthResponse)
@router.get("/api/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    """Report service liveness and a fresh store reachability probe."""

    status = request.app.state.store_monitor.refresh()
    return HealthResponse(
        status="ok",
        database="connected" if status.connected else "disconnected",
        environment=get_settings().app_env,
        timestamp=dt.datetime.now(dt.timezone.utc),
        detail=status.error,
    )


@init_db_router.get("/init-db", response_model=MessageResponse)
def init_db(request: Request) -> MessageResponse:
    try:
        ensure_todos_table(request.app.state.engine)
    except StoreError as exc:
        raise HTTPException(status_code=500, detail={"error": str(exc.cause or exc)}) from exc
    request.app.state.store_monitor.refresh()
    return MessageResponse(message="todos table created or verified")
