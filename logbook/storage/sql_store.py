"""Remote store: per-user rows in the SQL database."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from logbook.core.errors import NotFoundError, PersistenceError
from logbook.models import (
    Task,
    TaskRecord,
    UserSettingsRecord,
    WeekKey,
    WeeklyLog,
    WeeklyLogRecord,
    WorkWeekConfiguration,
)

logger = logging.getLogger(__name__)


def _task_from_record(record: TaskRecord) -> Task:
    return Task(
        id=record.id,
        content=record.content,
        date=record.date,
        created_at=record.created_at,
        skills=list(record.skills or []),
        user_id=record.user_id,
    )


def _log_from_record(record: WeeklyLogRecord) -> WeeklyLog:
    return WeeklyLog(
        id=record.id,
        week_number=record.week_number,
        year=record.year,
        start_date=record.start_date,
        end_date=record.end_date,
        tasks=[Task.model_validate(item) for item in record.tasks or []],
        compiled_at=record.compiled_at,
        user_id=record.user_id,
    )


class SqlStore:
    """Store scoped to one authenticated user; every query filters on ``user_id``."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        # 日本語: DB例外は rollback 後に操作名付きで送出 / English: Roll back and re-raise DB failures with the operation name
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Remote store operation failed: %s", name)
            raise PersistenceError(name, str(exc)) from exc

    def _task_record(self, task_id: str) -> Optional[TaskRecord]:
        return self.db.exec(
            select(TaskRecord).where(TaskRecord.user_id == self.user_id, TaskRecord.id == task_id)
        ).first()

    def _log_record(self, key: WeekKey) -> Optional[WeeklyLogRecord]:
        return self.db.exec(
            select(WeeklyLogRecord).where(
                WeeklyLogRecord.user_id == self.user_id,
                WeeklyLogRecord.week_number == key.week_number,
                WeeklyLogRecord.year == key.year,
            )
        ).first()

    def list_tasks(self) -> List[Task]:
        with self._operation("list_tasks"):
            records = self.db.exec(
                select(TaskRecord)
                .where(TaskRecord.user_id == self.user_id)
                .order_by(TaskRecord.date, TaskRecord.created_at)
            ).all()
        return [_task_from_record(record) for record in records]

    def insert_task(self, task: Task) -> Task:
        with self._operation("insert_task"):
            record = TaskRecord(
                id=task.id,
                user_id=self.user_id,
                content=task.content,
                date=task.date,
                created_at=task.created_at,
                skills=list(task.skills),
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        return _task_from_record(record)

    def delete_task(self, task_id: str) -> None:
        with self._operation("delete_task"):
            self.db.exec(
                delete(TaskRecord).where(TaskRecord.user_id == self.user_id, TaskRecord.id == task_id)
            )
            self.db.commit()

    def update_task_skills(self, task_id: str, skills: Sequence[str]) -> Task:
        with self._operation("update_task_skills"):
            record = self._task_record(task_id)
            if record is None:
                raise NotFoundError("Task", task_id)
            # 日本語: JSON列は再代入しないと変更検知されない / English: JSON columns only register changes on reassignment
            record.skills = list(skills)
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        return _task_from_record(record)

    def list_weekly_logs(self) -> List[WeeklyLog]:
        with self._operation("list_weekly_logs"):
            records = self.db.exec(
                select(WeeklyLogRecord).where(WeeklyLogRecord.user_id == self.user_id)
            ).all()
        return [_log_from_record(record) for record in records]

    def find_weekly_log(self, key: WeekKey) -> Optional[WeeklyLog]:
        with self._operation("find_weekly_log"):
            record = self._log_record(key)
        return _log_from_record(record) if record else None

    def upsert_weekly_log(self, log: WeeklyLog) -> WeeklyLog:
        snapshot = [task.model_dump(mode="json") for task in log.tasks]
        with self._operation("upsert_weekly_log"):
            record = self._log_record(log.key)
            if record is None:
                record = WeeklyLogRecord(
                    id=log.id,
                    user_id=self.user_id,
                    week_number=log.week_number,
                    year=log.year,
                    start_date=log.start_date,
                    end_date=log.end_date,
                    tasks=snapshot,
                    compiled_at=log.compiled_at,
                )
            else:
                record.start_date = log.start_date
                record.end_date = log.end_date
                record.tasks = snapshot
                record.compiled_at = log.compiled_at
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        return _log_from_record(record)

    def delete_weekly_log(self, log_id: str) -> None:
        with self._operation("delete_weekly_log"):
            self.db.exec(
                delete(WeeklyLogRecord).where(
                    WeeklyLogRecord.user_id == self.user_id, WeeklyLogRecord.id == log_id
                )
            )
            self.db.commit()

    def get_settings(self) -> WorkWeekConfiguration:
        with self._operation("get_settings"):
            record = self.db.get(UserSettingsRecord, self.user_id)
        if record is None:
            return WorkWeekConfiguration()
        return WorkWeekConfiguration(
            epoch_date=record.epoch_date,
            include_saturday=bool(record.include_saturday),
        )

    def save_settings(self, config: WorkWeekConfiguration) -> WorkWeekConfiguration:
        with self._operation("save_settings"):
            record = self.db.get(UserSettingsRecord, self.user_id)
            if record is None:
                record = UserSettingsRecord(user_id=self.user_id)
            record.epoch_date = config.epoch_date
            record.include_saturday = config.include_saturday
            self.db.add(record)
            self.db.commit()
        return config

    def clear_all(self) -> None:
        with self._operation("clear_all"):
            self.db.exec(delete(TaskRecord).where(TaskRecord.user_id == self.user_id))
            self.db.exec(delete(WeeklyLogRecord).where(WeeklyLogRecord.user_id == self.user_id))
            self.db.commit()
