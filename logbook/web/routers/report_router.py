"""Logbook export routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from logbook.services.report_service import render, report_filename
from logbook.storage import LogbookStore
from logbook.web import handlers as web_handlers
from logbook.web.dependencies import get_store

router = APIRouter()


@router.post("/api/report", name="export_report")
async def export_report(request: Request, store: LogbookStore = Depends(get_store)):
    # 日本語: 全週ログを古い順に並べてPDF化 / English: Render every compiled week, oldest first, as a PDF
    return await web_handlers.export_report(
        request,
        store,
        render_fn=render,
        filename_fn=report_filename,
    )
