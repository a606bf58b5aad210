"""FastAPI application assembly."""

from __future__ import annotations

import os

from fastapi import FastAPI
from starlette.middleware.sessions import SessionMiddleware

from logbook.core.config import PROXY_PREFIX, SESSION_SECRET
from logbook.core.db import _init_db
from logbook.web.routers import (
    log_router,
    report_router,
    session_router,
    settings_router,
    task_router,
    week_router,
)


def create_app(*, init_db_on_startup: bool = True) -> FastAPI:
    # 日本語: 逆プロキシ配下運用を想定して root_path を環境変数から解決 / English: Resolve root_path from env for reverse-proxy deployments
    proxy_prefix = os.getenv("PROXY_PREFIX", PROXY_PREFIX)
    # 日本語: 実行時の SESSION_SECRET を優先 / English: Prefer runtime SESSION_SECRET override
    session_secret = os.getenv("SESSION_SECRET") or SESSION_SECRET

    app = FastAPI(title="Internship Logbook", root_path=proxy_prefix)

    if not session_secret:
        raise ValueError("SESSION_SECRET environment variable is not set. Please set it in secrets.env.")

    # 日本語: 署名付きセッション (認証済みユーザーIDとフラッシュ) / English: Signed session for the user id and flash messages
    app.add_middleware(SessionMiddleware, secret_key=session_secret)

    # 日本語: 機能別ルーターを順次登録 / English: Register feature routers
    app.include_router(task_router)
    app.include_router(week_router)
    app.include_router(log_router)
    app.include_router(report_router)
    app.include_router(settings_router)
    app.include_router(session_router)

    if init_db_on_startup:

        @app.on_event("startup")
        def _startup_init_db() -> None:
            # 日本語: 起動時にマイグレーション適用を保証 / English: Ensure migrations are applied on startup
            _init_db()

    return app
