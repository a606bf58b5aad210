"""Compiled weekly log routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from logbook.storage import LogbookStore
from logbook.web import handlers as web_handlers
from logbook.web.dependencies import get_store
from logbook.web.session import flash, pop_flashed_messages

router = APIRouter()


@router.get("/api/logs", name="api_logs")
def api_logs(order: str = "chronological", store: LogbookStore = Depends(get_store)):
    return web_handlers.api_logs(store, order=order)


@router.delete("/api/logs/{log_id}", name="delete_log")
def delete_log(request: Request, log_id: str, store: LogbookStore = Depends(get_store)):
    return web_handlers.delete_log(request, log_id, store, flash_fn=flash)


@router.get("/api/flash", name="api_flash")
def api_flash(request: Request):
    # 日本語: セッションフラッシュを取得 / English: Fetch session flash messages
    return web_handlers.api_flash(request, pop_flashed_messages_fn=pop_flashed_messages)
