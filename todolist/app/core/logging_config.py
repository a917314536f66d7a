import logging
import os
from typing import Optional

_CONFIGURED = False


class SafeFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        if "todo_id" not in record.__dict__ and "todo" in record.__dict__:
            record.__dict__["todo_id"] = record.__dict__["todo"]
        for key in ("op", "todo_id", "source"):
            if key not in record.__dict__:
                record.__dict__[key] = "-"
        return super().format(record)


def configure_logging(level: Optional[str] = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    level_name = (
        level
        or os.getenv("APP_LOG_LEVEL")
        or os.getenv("UVICORN_LOG_LEVEL")
        or os.getenv("LOG_LEVEL")
        or "INFO"
    ).upper()
    resolved_level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        fmt = (
            "%(asctime)s %(levelname)s %(name)s "
            "op=%(op)s todo=%(todo_id)s source=%(source)s "
            "%(message)s"
        )
        handler = logging.StreamHandler()
        handler.setFormatter(SafeFormatter(fmt))
        root.addHandler(handler)

    root.setLevel(resolved_level)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logger = logging.getLogger(name)
        logger.setLevel(resolved_level)

    _CONFIGURED = True
