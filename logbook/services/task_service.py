"""Task store: create, tag and query recorded work items."""

from __future__ import annotations

import datetime
import logging
import uuid
from typing import Iterable, List

from logbook.core.errors import NotFoundError, ValidationError
from logbook.models import Task
from logbook.services.calendar_service import (
    WeekDescriptor,
    WorkWeekConfiguration,
    day_key,
    is_date_in_week,
    is_working_day,
    to_date,
)
from logbook.storage.base import LogbookStore

logger = logging.getLogger(__name__)


def _new_task_id() -> str:
    return f"task-{uuid.uuid4().hex}"


def _normalize_skills(skills: Iterable[str]) -> List[str]:
    # 日本語: 前後空白のみ除去。大文字小文字は区別する / English: Strip whitespace only; matching stays case-sensitive
    normalized = []
    for skill in skills:
        if not isinstance(skill, str):
            raise ValidationError("skills must be strings")
        text = skill.strip()
        if text and text not in normalized:
            normalized.append(text)
    return normalized


class TaskService:
    def __init__(self, store: LogbookStore):
        self.store = store

    def add(self, content: str, date: datetime.datetime | datetime.date) -> Task:
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("Task content must not be empty")
        if isinstance(date, datetime.datetime):
            task_date = date
            # 日本語: タイムゾーン付きはローカルの naive 時刻に揃える / English: Store aware input as naive local time
            if task_date.tzinfo is not None:
                task_date = task_date.astimezone().replace(tzinfo=None)
        elif isinstance(date, datetime.date):
            # 日本語: 日付のみ指定時は現在時刻を付与 / English: Attach the current time when only a date is given
            task_date = datetime.datetime.combine(date, datetime.datetime.now().time())
        else:
            raise ValidationError("Task date must be a date or datetime")

        task = Task(
            id=_new_task_id(),
            content=content.strip(),
            date=task_date,
            created_at=datetime.datetime.now(),
            skills=[],
            user_id=self.store.user_id,
        )
        stored = self.store.insert_task(task)
        logger.info("Added task %s for %s", stored.id, day_key(stored.date))
        return stored

    def delete(self, task_id: str) -> None:
        self.store.delete_task(task_id)
        logger.info("Deleted task %s", task_id)

    def get(self, task_id: str) -> Task:
        for task in self.store.list_tasks():
            if task.id == task_id:
                return task
        raise NotFoundError("Task", task_id)

    def add_skills(self, task_id: str, skills: Iterable[str]) -> Task:
        task = self.get(task_id)
        merged = list(task.skills)
        for skill in _normalize_skills(skills):
            if skill not in merged:
                merged.append(skill)
        if merged == task.skills:
            return task
        return self.store.update_task_skills(task_id, merged)

    def remove_skill(self, task_id: str, skill: str) -> Task:
        task = self.get(task_id)
        if skill not in task.skills:
            return task
        return self.store.update_task_skills(task_id, [item for item in task.skills if item != skill])

    def all_tasks(self) -> List[Task]:
        return self.store.list_tasks()

    def tasks_on_day(self, date: datetime.date | datetime.datetime) -> List[Task]:
        key = day_key(date)
        return [task for task in self.store.list_tasks() if day_key(task.date) == key]

    def tasks_in_range(
        self,
        start: datetime.date,
        end: datetime.date,
        config: WorkWeekConfiguration | None = None,
    ) -> List[Task]:
        """Tasks dated within ``[start, end]``; non-working days dropped when ``config`` is given."""
        start_day, end_day = to_date(start), to_date(end)
        matched = []
        for task in self.store.list_tasks():
            if not start_day <= to_date(task.date) <= end_day:
                continue
            if config is not None and not is_working_day(task.date, config):
                continue
            matched.append(task)
        return matched

    def tasks_for_week(self, week: WeekDescriptor, config: WorkWeekConfiguration) -> List[Task]:
        return [
            task
            for task in self.store.list_tasks()
            if is_date_in_week(task.date, week) and is_working_day(task.date, config)
        ]
