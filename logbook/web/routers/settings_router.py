"""Work-week settings and data reset routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from logbook.storage import LogbookStore
from logbook.web import handlers as web_handlers
from logbook.web.dependencies import get_store
from logbook.web.session import flash

router = APIRouter()


@router.get("/api/settings", name="api_settings")
def api_settings(store: LogbookStore = Depends(get_store)):
    return web_handlers.api_settings(store)


@router.put("/api/settings", name="update_settings")
async def update_settings(request: Request, store: LogbookStore = Depends(get_store)):
    return await web_handlers.update_settings(request, store)


@router.delete("/api/data", name="reset_data")
def reset_data(request: Request, store: LogbookStore = Depends(get_store)):
    # 日本語: 全タスクと週ログを削除 (設定は保持) / English: Reset tasks and weekly logs; settings are kept
    return web_handlers.reset_data(request, store, flash_fn=flash)
