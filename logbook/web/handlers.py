"""HTTP handler implementations used by the routers."""

from __future__ import annotations

import datetime
import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

from dateutil import parser as date_parser
from fastapi import HTTPException, Request
from fastapi.responses import Response
from pydantic import ValidationError as PydanticValidationError

from logbook.core.errors import (
    LogbookError,
    NotFoundError,
    PersistenceError,
    RenderError,
    ValidationError,
)
from logbook.models import CoverPageData, Task, WeeklyLog
from logbook.services.calendar_service import (
    WeekDescriptor,
    WorkWeekConfiguration,
    day_key,
    format_date,
    format_week_range,
    next_week,
    parse_day_key,
    previous_week,
    tasks_by_working_day,
    week_containing,
    week_string_identifier,
    working_days,
)
from logbook.services.compile_service import AUTO_COMPILE_MESSAGE, WeeklyLogCompiler, week_skills
from logbook.services.task_service import TaskService
from logbook.storage.base import LogbookStore

logger = logging.getLogger(__name__)


@contextmanager
def _http_errors() -> Iterator[None]:
    # 日本語: ドメイン例外をHTTPステータスへ変換 / English: Translate domain errors into HTTP statuses
    try:
        yield
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except RenderError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except LogbookError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


async def _json_payload(request: Request) -> Dict[str, Any]:
    body = await request.body()
    if not body.strip():
        return {}
    try:
        payload = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="request body must be valid JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="request body must be a JSON object")
    return payload


def _parse_path_date(date_str: str) -> datetime.date:
    try:
        return parse_day_key(date_str)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid date format")


def _parse_task_date(value: Any) -> datetime.datetime:
    if value in (None, ""):
        return datetime.datetime.now()
    if not isinstance(value, str):
        raise ValidationError("date must be an ISO 8601 string")
    try:
        return date_parser.isoparse(value)
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid date: {value!r}")


def serialize_task(task: Task) -> Dict[str, Any]:
    payload = task.model_dump(mode="json")
    payload["day"] = day_key(task.date)
    return payload


def serialize_week(week: WeekDescriptor) -> Dict[str, Any]:
    return {
        "id": week_string_identifier(week),
        "start_date": week.start_date.isoformat(),
        "end_date": week.end_date.isoformat(),
        "week_number": week.week_number,
        "year": week.year,
        "reference_date": week.reference_date.isoformat(),
        "range_display": format_week_range(week.start_date, week.end_date),
    }


def serialize_log(log: WeeklyLog) -> Dict[str, Any]:
    payload = log.model_dump(mode="json")
    payload["range_display"] = format_week_range(log.start_date, log.end_date)
    return payload


def serialize_settings(config: WorkWeekConfiguration) -> Dict[str, Any]:
    return {
        "epoch_date": config.epoch_date.isoformat() if config.epoch_date else None,
        "include_saturday": config.include_saturday,
    }


def api_flash(request: Request, *, pop_flashed_messages_fn):
    return {"messages": pop_flashed_messages_fn(request)}


def api_today(
    request: Request,
    store: LogbookStore,
    *,
    maybe_auto_compile_fn,
    flash_fn,
    today: datetime.date | None = None,
):
    today = today or datetime.date.today()
    with _http_errors():
        config = store.get_settings()
        try:
            auto_log = maybe_auto_compile_fn(store, config, today)
        except LogbookError:
            flash_fn(request, "There was a problem compiling your weekly log.")
            raise
        if auto_log is not None:
            flash_fn(request, AUTO_COMPILE_MESSAGE)
        tasks = TaskService(store).tasks_on_day(today)

    return {
        "date": today.isoformat(),
        "date_display": format_date(today, with_weekday=True),
        "tasks": [serialize_task(task) for task in tasks],
        "auto_compiled_log_id": auto_log.id if auto_log else None,
    }


def api_tasks(store: LogbookStore, *, start: str | None = None, end: str | None = None):
    with _http_errors():
        service = TaskService(store)
        if start or end:
            start_date = _parse_path_date(start) if start else datetime.date.min
            end_date = _parse_path_date(end) if end else datetime.date.max
            if start_date > end_date:
                raise HTTPException(status_code=400, detail="start cannot be after end")
            tasks = service.tasks_in_range(start_date, end_date)
        else:
            tasks = service.all_tasks()
    return {"tasks": [serialize_task(task) for task in tasks]}


def api_tasks_on_day(date_str: str, store: LogbookStore):
    date_obj = _parse_path_date(date_str)
    with _http_errors():
        tasks = TaskService(store).tasks_on_day(date_obj)
    return {"date": date_obj.isoformat(), "tasks": [serialize_task(task) for task in tasks]}


async def create_task(request: Request, store: LogbookStore):
    payload = await _json_payload(request)
    with _http_errors():
        task_date = _parse_task_date(payload.get("date"))
        task = TaskService(store).add(payload.get("content") or "", task_date)
    return {"status": "ok", "task": serialize_task(task)}


def delete_task(task_id: str, store: LogbookStore):
    with _http_errors():
        TaskService(store).delete(task_id)
    return {"status": "ok"}


async def add_task_skills(request: Request, task_id: str, store: LogbookStore):
    payload = await _json_payload(request)
    skills = payload.get("skills")
    if isinstance(skills, str):
        skills = [skills]
    if not isinstance(skills, list):
        raise HTTPException(status_code=400, detail="skills must be a list")
    with _http_errors():
        task = TaskService(store).add_skills(task_id, skills)
    return {"status": "ok", "task": serialize_task(task)}


def remove_task_skill(task_id: str, skill: str, store: LogbookStore):
    with _http_errors():
        task = TaskService(store).remove_skill(task_id, skill)
    return {"status": "ok", "task": serialize_task(task)}


def _week_payload(week: WeekDescriptor, store: LogbookStore, config: WorkWeekConfiguration):
    tasks = TaskService(store).tasks_for_week(week, config)
    compiled = WeeklyLogCompiler(store).get(week)
    grouped = tasks_by_working_day(tasks, week, config)
    return {
        "week": serialize_week(week),
        "working_days": [day.isoformat() for day in working_days(week, config)],
        "days": [
            {
                "date": key,
                "day_name": f"{parse_day_key(key):%A}",
                "tasks": [serialize_task(task) for task in day_tasks],
            }
            for key, day_tasks in grouped.items()
        ],
        "task_count": len(tasks),
        "skills": week_skills(tasks),
        "compiled_log": serialize_log(compiled) if compiled else None,
    }


def api_week(date_str: str, store: LogbookStore):
    date_obj = _parse_path_date(date_str)
    with _http_errors():
        config = store.get_settings()
        return _week_payload(week_containing(date_obj, config), store, config)


def api_week_neighbor(date_str: str, direction: str, store: LogbookStore):
    date_obj = _parse_path_date(date_str)
    with _http_errors():
        config = store.get_settings()
        week = week_containing(date_obj, config)
        if direction == "previous":
            target = previous_week(week, config)
        elif direction == "next":
            target = next_week(week, config)
        else:
            raise HTTPException(status_code=404, detail="Unknown direction")
        return _week_payload(target, store, config)


def compile_week(request: Request, date_str: str, store: LogbookStore, *, flash_fn):
    date_obj = _parse_path_date(date_str)
    with _http_errors():
        config = store.get_settings()
        week = week_containing(date_obj, config)
        tasks = TaskService(store).tasks_for_week(week, config)
        if not tasks:
            raise HTTPException(status_code=400, detail="No tasks recorded for this week")
        log = WeeklyLogCompiler(store).compile(week, tasks)
    flash_fn(request, "Your tasks have been compiled into a weekly log.")
    return {"status": "ok", "log": serialize_log(log)}


def api_logs(store: LogbookStore, *, order: str = "chronological"):
    if order not in {"chronological", "recent"}:
        raise HTTPException(status_code=400, detail="order must be 'chronological' or 'recent'")
    with _http_errors():
        logs = WeeklyLogCompiler(store).list_logs(newest_first=order == "recent")
    return {"logs": [serialize_log(log) for log in logs]}


def delete_log(request: Request, log_id: str, store: LogbookStore, *, flash_fn):
    with _http_errors():
        WeeklyLogCompiler(store).delete(log_id)
    flash_fn(request, "The weekly log has been removed from your logbook.")
    return {"status": "ok"}


def api_settings(store: LogbookStore):
    with _http_errors():
        config = store.get_settings()
    return {"settings": serialize_settings(config)}


async def update_settings(request: Request, store: LogbookStore):
    payload = await _json_payload(request)
    epoch_raw = payload.get("epoch_date")
    epoch_date = None
    if epoch_raw:
        if not isinstance(epoch_raw, str):
            raise HTTPException(status_code=400, detail="epoch_date must be YYYY-MM-DD")
        epoch_date = _parse_path_date(epoch_raw)
    include_saturday = payload.get("include_saturday", False)
    if not isinstance(include_saturday, bool):
        raise HTTPException(status_code=400, detail="include_saturday must be a boolean")

    with _http_errors():
        config = store.save_settings(
            WorkWeekConfiguration(epoch_date=epoch_date, include_saturday=include_saturday)
        )
    return {"status": "ok", "settings": serialize_settings(config)}


async def export_report(
    request: Request,
    store: LogbookStore,
    *,
    render_fn,
    filename_fn,
    today: datetime.date | None = None,
):
    payload = await _json_payload(request)
    try:
        cover = CoverPageData.model_validate(payload.get("cover") or {})
    except PydanticValidationError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid cover data: {exc.errors()}")

    generated_on = today or datetime.date.today()
    with _http_errors():
        logs: List[WeeklyLog] = WeeklyLogCompiler(store).list_logs()
        pdf_bytes = render_fn(logs, cover, generated_on=generated_on)

    filename = filename_fn(generated_on)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


async def create_session(request: Request, *, sign_in_fn):
    payload = await _json_payload(request)
    user_id = payload.get("user_id")
    if not isinstance(user_id, str) or not user_id.strip():
        raise HTTPException(status_code=400, detail="user_id is required")
    sign_in_fn(request, user_id.strip())
    logger.info("Signed in user %s; using the remote store", user_id.strip())
    return {"status": "ok", "authenticated": True}


def delete_session(request: Request, *, sign_out_fn):
    sign_out_fn(request)
    return {"status": "ok", "authenticated": False}


def reset_data(request: Request, store: LogbookStore, *, flash_fn):
    # 日本語: タスクと週ログのみ削除し設定は残す / English: Drop tasks and weekly logs; settings survive
    with _http_errors():
        store.clear_all()
    logger.info("Cleared all tasks and weekly logs for %s", store.user_id or "local store")
    flash_fn(request, "All tasks and weekly logs have been cleared.")
    return {"status": "ok"}
