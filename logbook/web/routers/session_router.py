"""Session routes for the externally authenticated user."""

from __future__ import annotations

from fastapi import APIRouter, Request

from logbook.web import handlers as web_handlers
from logbook.web.session import sign_in, sign_out

router = APIRouter()


@router.post("/api/session", name="create_session")
async def create_session(request: Request):
    return await web_handlers.create_session(request, sign_in_fn=sign_in)


@router.delete("/api/session", name="delete_session")
def delete_session(request: Request):
    return web_handlers.delete_session(request, sign_out_fn=sign_out)
