"""Session-backed flash messages and signed-in user helpers."""

from __future__ import annotations

from typing import List, Optional

from fastapi import Request

SESSION_USER_KEY = "user_id"


def flash(request: Request, message: str) -> None:
    # 日本語: セッションにフラッシュメッセージを追記 / English: Append flash message into session storage
    flashes = request.session.setdefault("_flashes", [])
    flashes.append(message)
    request.session["_flashes"] = flashes


def pop_flashed_messages(request: Request) -> List[str]:
    # 日本語: 1回表示したメッセージを取り出して削除 / English: Pop one-time flash messages
    return request.session.pop("_flashes", [])


def current_user_id(request: Request) -> Optional[str]:
    # 日本語: 外部認証済みユーザーIDのみを参照 / English: Only the externally authenticated user id is read here
    user_id = request.session.get(SESSION_USER_KEY)
    return user_id if isinstance(user_id, str) and user_id else None


def sign_in(request: Request, user_id: str) -> None:
    request.session[SESSION_USER_KEY] = user_id


def sign_out(request: Request) -> None:
    request.session.pop(SESSION_USER_KEY, None)
