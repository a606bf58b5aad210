"""Persistence adapters and backend selection."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from sqlmodel import Session

from logbook.core.config import get_local_store_dir

from .base import LogbookStore
from .json_store import JsonFileStore
from .sql_store import SqlStore


def select_store(
    user_id: Optional[str],
    *,
    db: Optional[Session] = None,
    local_dir: Optional[Path] = None,
) -> LogbookStore:
    """Remote per-user store when someone is signed in, local blobs otherwise."""
    if user_id:
        if db is None:
            raise ValueError("A database session is required for an authenticated user.")
        return SqlStore(db, user_id)
    return JsonFileStore(local_dir or get_local_store_dir())


__all__ = ["LogbookStore", "JsonFileStore", "SqlStore", "select_store"]
