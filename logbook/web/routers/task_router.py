"""Task API routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from logbook.services.compile_service import maybe_auto_compile
from logbook.storage import LogbookStore
from logbook.web import handlers as web_handlers
from logbook.web.dependencies import get_store
from logbook.web.session import flash

# 日本語: 日次タスクAPI群 / English: Daily task API router
router = APIRouter()


@router.get("/api/today", name="api_today")
def api_today(request: Request, store: LogbookStore = Depends(get_store)):
    # 日本語: 読み込み時に週末の自動コンパイルを判定 / English: Run the end-of-week auto compile check on load
    return web_handlers.api_today(
        request,
        store,
        maybe_auto_compile_fn=maybe_auto_compile,
        flash_fn=flash,
    )


@router.get("/api/tasks", name="api_tasks")
def api_tasks(
    start: Optional[str] = None,
    end: Optional[str] = None,
    store: LogbookStore = Depends(get_store),
):
    return web_handlers.api_tasks(store, start=start, end=end)


@router.post("/api/tasks", name="create_task")
async def create_task(request: Request, store: LogbookStore = Depends(get_store)):
    return await web_handlers.create_task(request, store)


@router.get("/api/tasks/day/{date_str}", name="api_tasks_on_day")
def api_tasks_on_day(date_str: str, store: LogbookStore = Depends(get_store)):
    return web_handlers.api_tasks_on_day(date_str, store)


@router.delete("/api/tasks/{task_id}", name="delete_task")
def delete_task(task_id: str, store: LogbookStore = Depends(get_store)):
    return web_handlers.delete_task(task_id, store)


@router.post("/api/tasks/{task_id}/skills", name="add_task_skills")
async def add_task_skills(request: Request, task_id: str, store: LogbookStore = Depends(get_store)):
    return await web_handlers.add_task_skills(request, task_id, store)


@router.delete("/api/tasks/{task_id}/skills/{skill}", name="remove_task_skill")
def remove_task_skill(task_id: str, skill: str, store: LogbookStore = Depends(get_store)):
    return web_handlers.remove_task_skill(task_id, skill, store)
