from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class TodoCreate(BaseModel):
    # Optional so that a missing text is reported as a 400 by the service
    text: Optional[str] = None
    completed: bool = False


class TodoUpdate(BaseModel):
    text: Optional[str] = None
    completed: Optional[bool] = None


class TodoOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str
    completed: bool
    created_at: datetime


class TodoDeleted(BaseModel):
    ok: bool = True
    message: str
    id: int
    todo: TodoOut


class HealthResponse(BaseModel):
    status: str
    database: str
    environment: str
    timestamp: datetime
    detail: Optional[str] = None


class MessageResponse(BaseModel):
    message: str
