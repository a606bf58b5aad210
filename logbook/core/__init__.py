"""Core package exports."""

from .config import (
    BASE_DIR,
    DATABASE_URL,
    PROXY_PREFIX,
    SESSION_SECRET,
    get_local_store_dir,
    get_report_title,
)
from .db import Session, create_session, engine
from .errors import LogbookError, NotFoundError, PersistenceError, RenderError, ValidationError

__all__ = [
    "BASE_DIR",
    "DATABASE_URL",
    "PROXY_PREFIX",
    "SESSION_SECRET",
    "get_local_store_dir",
    "get_report_title",
    "engine",
    "Session",
    "create_session",
    "LogbookError",
    "ValidationError",
    "NotFoundError",
    "PersistenceError",
    "RenderError",
]
