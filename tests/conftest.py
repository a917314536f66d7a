from __future__ import annotations

import os

# Point the module-level engine at a throwaway database before the app is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("STORE_PROBE_INTERVAL_SEC", "0")

import datetime as dt

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from todolist.adapters.todo_repository_sql import SQLAlchemyTodoRepository
from todolist.app.db import StoreMonitor, StoreStatus, ensure_todos_table, get_db
from todolist.app.main import app


@pytest.fixture
def connected() -> StoreStatus:
    return StoreStatus(connected=True, checked_at=dt.datetime.now(dt.timezone.utc))


@pytest.fixture
def disconnected() -> StoreStatus:
    return StoreStatus(
        connected=False,
        checked_at=dt.datetime.now(dt.timezone.utc),
        error="connection refused",
    )


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    ensure_todos_table(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def repo(session_factory):
    session = session_factory()
    try:
        yield SQLAlchemyTodoRepository(session)
    finally:
        session.close()


@pytest.fixture
def api_app(engine, session_factory, monkeypatch):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr(app.state, "engine", engine)
    monkeypatch.setattr(app.state, "store_monitor", StoreMonitor(engine))
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield app
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def client(api_app):
    with TestClient(api_app) as test_client:
        yield test_client
