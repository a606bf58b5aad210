"""FastAPI dependencies."""

from __future__ import annotations

from typing import Iterator

from fastapi import Request

from logbook.core.db import create_session
from logbook.storage import LogbookStore, select_store
from logbook.web.session import current_user_id


def get_store(request: Request) -> Iterator[LogbookStore]:
    # 日本語: 認証状態でリモート/ローカルを切り替えるのはここだけ / English: The only place the auth state picks a backend
    user_id = current_user_id(request)
    if not user_id:
        yield select_store(None)
        return
    with create_session() as db:
        yield select_store(user_id, db=db)
