from __future__ import annotations

import os
from typing import Dict

from todolist.app.config import Settings, get_settings


def _bool_env(name: str, default: str = "false") -> bool:
    """
    Parse env var into bool.
    True values: 1, true, yes, on (case-insensitive).
    """
    val = os.getenv(name, default)
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def get_features(settings: Settings | None = None) -> Dict[str, bool]:
    """
    Operational feature flags (runtime toggles).
    Keep ALL flags centralized here to avoid scattered conditionals in routers.
    """
    settings = settings or get_settings()
    dev_default = "false" if settings.is_production else "true"
    return {
        # Table bootstrap endpoint; never exposed in production unless forced.
        "init_db_route": _bool_env("FEATURE_INIT_DB_ROUTE", dev_default),
    }
