"""Weekly log compilation and the end-of-week auto compile check."""

from __future__ import annotations

import datetime
import logging
import uuid
from typing import Callable, Iterable, List, Optional, Sequence

from logbook.models import Task, WeeklyLog
from logbook.services.calendar_service import (
    WeekDescriptor,
    WorkWeekConfiguration,
    current_week,
    last_working_day,
)
from logbook.services.task_service import TaskService
from logbook.storage.base import LogbookStore

logger = logging.getLogger(__name__)

AUTO_COMPILE_MESSAGE = "Your weekly tasks have been compiled into the logbook."


def _new_log_id() -> str:
    return f"log-{uuid.uuid4().hex}"


def week_skills(tasks: Iterable[Task]) -> List[str]:
    """Distinct skills across ``tasks`` in first-seen order."""
    seen: List[str] = []
    for task in tasks:
        for skill in task.skills:
            if skill not in seen:
                seen.append(skill)
    return seen


def chronological_key(log: WeeklyLog):
    return (log.start_date, log.year, log.week_number)


class WeeklyLogCompiler:
    def __init__(
        self,
        store: LogbookStore,
        *,
        clock: Callable[[], datetime.datetime] = datetime.datetime.now,
    ):
        self.store = store
        self.clock = clock

    def compile(self, week: WeekDescriptor, tasks: Sequence[Task]) -> WeeklyLog:
        """Upsert the log for ``week.key``; replaces snapshot, bounds and compiled_at."""
        existing = self.store.find_weekly_log(week.key)
        log = WeeklyLog(
            id=existing.id if existing else _new_log_id(),
            week_number=week.week_number,
            year=week.year,
            start_date=week.start_date,
            end_date=week.end_date,
            # 日本語: 後からの編集が反映されないよう深いコピーで保存 / English: Deep copy so later task edits never leak in
            tasks=[task.model_copy(deep=True) for task in tasks],
            compiled_at=self.clock(),
            user_id=self.store.user_id,
        )
        stored = self.store.upsert_weekly_log(log)
        logger.info(
            "%s weekly log %s (week %s, %s) with %d tasks",
            "Recompiled" if existing else "Compiled",
            stored.id,
            stored.week_number,
            stored.year,
            len(stored.tasks),
        )
        return stored

    def get(self, week: WeekDescriptor) -> Optional[WeeklyLog]:
        return self.store.find_weekly_log(week.key)

    def delete(self, log_id: str) -> None:
        self.store.delete_weekly_log(log_id)
        logger.info("Deleted weekly log %s", log_id)

    def list_logs(self, *, newest_first: bool = False) -> List[WeeklyLog]:
        logs = self.store.list_weekly_logs()
        if newest_first:
            # 日本語: ログブック画面はコンパイル日時の新しい順 / English: Logbook listing is most recently compiled first
            return sorted(logs, key=lambda log: log.compiled_at, reverse=True)
        return sorted(logs, key=chronological_key)


def maybe_auto_compile(
    store: LogbookStore,
    config: WorkWeekConfiguration,
    today: datetime.date | None = None,
    *,
    clock: Callable[[], datetime.datetime] = datetime.datetime.now,
) -> Optional[WeeklyLog]:
    """Compile the current week on its last working day if nothing is compiled yet.

    Returns the new log, or ``None`` when the check does not fire.
    """
    today = today or datetime.date.today()
    if today.weekday() != last_working_day(config):
        return None

    week = current_week(config, today)
    compiler = WeeklyLogCompiler(store, clock=clock)
    if compiler.get(week) is not None:
        return None

    tasks = TaskService(store).tasks_for_week(week, config)
    if not tasks:
        return None

    log = compiler.compile(week, tasks)
    logger.info("Auto-compiled week %s, %s on %s", week.week_number, week.year, today.isoformat())
    return log
