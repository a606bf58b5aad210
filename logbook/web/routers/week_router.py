"""Week view and compile routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from logbook.storage import LogbookStore
from logbook.web import handlers as web_handlers
from logbook.web.dependencies import get_store
from logbook.web.session import flash

# 日本語: 週表示とコンパイルAPI群 / English: Week view and compile router
router = APIRouter()


@router.get("/api/week/{date_str}", name="api_week")
def api_week(date_str: str, store: LogbookStore = Depends(get_store)):
    return web_handlers.api_week(date_str, store)


@router.get("/api/week/{date_str}/previous", name="api_previous_week")
def api_previous_week(date_str: str, store: LogbookStore = Depends(get_store)):
    return web_handlers.api_week_neighbor(date_str, "previous", store)


@router.get("/api/week/{date_str}/next", name="api_next_week")
def api_next_week(date_str: str, store: LogbookStore = Depends(get_store)):
    return web_handlers.api_week_neighbor(date_str, "next", store)


@router.post("/api/week/{date_str}/compile", name="compile_week")
def compile_week(request: Request, date_str: str, store: LogbookStore = Depends(get_store)):
    # 日本語: 手動コンパイル (同じ週は上書き) / English: Manual compile; the same week is overwritten
    return web_handlers.compile_week(request, date_str, store, flash_fn=flash)
