from __future__ import annotations

import datetime as dt
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from todolist.app.config import get_settings
from todolist.app.core.errors import StoreError

logger = logging.getLogger(__name__)


def _connect_args(database_url: str, ssl: bool) -> dict:
    # SQLite requires check_same_thread=False for usage across threads
    if database_url.startswith("sqlite"):
        return {"check_same_thread": False}
    if ssl:
        return {"sslmode": "require"}
    return {}


settings = get_settings()
DATABASE_URL = settings.database_url

engine = create_engine(DATABASE_URL, connect_args=_connect_args(DATABASE_URL, settings.database_ssl))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def ensure_todos_table(bind: Engine) -> None:
    """Create the todos table if it is absent (idempotent)."""

    from todolist.app.models import Todo

    try:
        Base.metadata.create_all(bind=bind, tables=[Todo.__table__])
    except SQLAlchemyError as exc:
        raise StoreError("could not create todos table", cause=exc) from exc


@dataclass(frozen=True)
class StoreStatus:
    """Result of one reachability probe against the store."""

    connected: bool
    checked_at: dt.datetime
    error: Optional[str] = None


def probe_store(bind: Engine) -> StoreStatus:
    checked_at = dt.datetime.now(dt.timezone.utc)
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("store probe failed: %s", exc.__class__.__name__)
        return StoreStatus(connected=False, checked_at=checked_at, error=str(exc))
    return StoreStatus(connected=True, checked_at=checked_at)


class StoreMonitor:
    """Hands out the latest probe result, re-probing once it is older than the interval.

    The todos table is (re)created on every probe that finds the store
    reachable after it was unreachable or never checked.
    """

    def __init__(self, bind: Engine, interval_sec: float = 0.0) -> None:
        self._bind = bind
        self._interval = dt.timedelta(seconds=max(interval_sec, 0.0))
        self._last: Optional[StoreStatus] = None
        self._initialised = False
        self._lock = threading.Lock()

    def refresh(self) -> StoreStatus:
        with self._lock:
            status = probe_store(self._bind)
            if not status.connected:
                self._initialised = False
            elif not self._initialised:
                try:
                    ensure_todos_table(self._bind)
                except StoreError as exc:
                    logger.exception("could not ensure todos table")
                    status = StoreStatus(
                        connected=False,
                        checked_at=status.checked_at,
                        error=str(exc.cause or exc),
                    )
                else:
                    self._initialised = True
            self._last = status
            return status

    def current(self) -> StoreStatus:
        last = self._last
        if last is None:
            return self.refresh()
        if self._interval and dt.datetime.now(dt.timezone.utc) - last.checked_at >= self._interval:
            return self.refresh()
        return last


def get_db():
    from sqlalchemy.orm import Session

    db: Session = SessionLocal()
    try:
        yield db
    finally:
        db.close()
