"""Local fallback store: whole-collection JSON blobs under fixed keys."""

from __future__ import annotations

import datetime
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from logbook.core.config import SETTINGS_STORAGE_KEY, TASKS_STORAGE_KEY, WEEKLY_LOGS_STORAGE_KEY
from logbook.core.errors import NotFoundError, PersistenceError
from logbook.models import Task, WeekKey, WeeklyLog, WorkWeekConfiguration

logger = logging.getLogger(__name__)


class JsonFileStore:
    """Key-value store backed by one JSON file per key.

    Every mutation reads the full collection, changes it and rewrites the
    whole blob, so the store never holds state between calls.
    """

    user_id: Optional[str] = None

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    def _blob_path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def _read_blob(self, key: str, default: Any) -> Any:
        path = self._blob_path(key)
        if not path.exists():
            return default
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.exception("Failed to read local blob %s", key)
            raise PersistenceError(f"read {key}", str(exc)) from exc

    def _write_blob(self, key: str, payload: Any) -> None:
        # 日本語: 一時ファイルへ書いてから置換し、途中状態を残さない / English: Write to a temp file then replace atomically
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, self._blob_path(key))
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            logger.exception("Failed to write local blob %s", key)
            raise PersistenceError(f"write {key}", str(exc)) from exc

    def _read_list(self, key: str) -> List[Any]:
        data = self._read_blob(key, [])
        if not isinstance(data, list):
            raise PersistenceError(f"read {key}", "blob is not a list")
        return data

    def _load_tasks(self) -> List[Task]:
        try:
            return [Task.model_validate(item) for item in self._read_list(TASKS_STORAGE_KEY)]
        except PydanticValidationError as exc:
            raise PersistenceError(f"read {TASKS_STORAGE_KEY}", str(exc)) from exc

    def _save_tasks(self, tasks: List[Task]) -> None:
        self._write_blob(TASKS_STORAGE_KEY, [task.model_dump(mode="json") for task in tasks])

    def _load_logs(self) -> List[WeeklyLog]:
        try:
            return [WeeklyLog.model_validate(item) for item in self._read_list(WEEKLY_LOGS_STORAGE_KEY)]
        except PydanticValidationError as exc:
            raise PersistenceError(f"read {WEEKLY_LOGS_STORAGE_KEY}", str(exc)) from exc

    def _save_logs(self, logs: List[WeeklyLog]) -> None:
        self._write_blob(WEEKLY_LOGS_STORAGE_KEY, [log.model_dump(mode="json") for log in logs])

    def list_tasks(self) -> List[Task]:
        return self._load_tasks()

    def insert_task(self, task: Task) -> Task:
        tasks = self._load_tasks()
        tasks.append(task)
        self._save_tasks(tasks)
        return task

    def delete_task(self, task_id: str) -> None:
        tasks = self._load_tasks()
        remaining = [task for task in tasks if task.id != task_id]
        if len(remaining) != len(tasks):
            self._save_tasks(remaining)

    def update_task_skills(self, task_id: str, skills: Sequence[str]) -> Task:
        tasks = self._load_tasks()
        for index, task in enumerate(tasks):
            if task.id == task_id:
                updated = task.model_copy(update={"skills": list(skills)})
                tasks[index] = updated
                self._save_tasks(tasks)
                return updated
        raise NotFoundError("Task", task_id)

    def list_weekly_logs(self) -> List[WeeklyLog]:
        return self._load_logs()

    def find_weekly_log(self, key: WeekKey) -> Optional[WeeklyLog]:
        for log in self._load_logs():
            if log.key == key:
                return log
        return None

    def upsert_weekly_log(self, log: WeeklyLog) -> WeeklyLog:
        logs = self._load_logs()
        for index, existing in enumerate(logs):
            if existing.key == log.key:
                # 日本語: 既存行のIDを保持して内容を差し替える / English: Keep the stored row id and replace the content
                stored = log.model_copy(update={"id": existing.id})
                logs[index] = stored
                break
        else:
            stored = log
            logs.append(stored)
        self._save_logs(logs)
        return stored

    def delete_weekly_log(self, log_id: str) -> None:
        logs = self._load_logs()
        remaining = [log for log in logs if log.id != log_id]
        if len(remaining) != len(logs):
            self._save_logs(remaining)

    def get_settings(self) -> WorkWeekConfiguration:
        data = self._read_blob(SETTINGS_STORAGE_KEY, {})
        if not isinstance(data, dict):
            raise PersistenceError(f"read {SETTINGS_STORAGE_KEY}", "settings blob is not an object")
        epoch_raw = data.get("epoch_date")
        try:
            epoch_date = datetime.date.fromisoformat(epoch_raw) if epoch_raw else None
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"read {SETTINGS_STORAGE_KEY}", str(exc)) from exc
        return WorkWeekConfiguration(
            epoch_date=epoch_date,
            include_saturday=bool(data.get("include_saturday", False)),
        )

    def save_settings(self, config: WorkWeekConfiguration) -> WorkWeekConfiguration:
        self._write_blob(
            SETTINGS_STORAGE_KEY,
            {
                "epoch_date": config.epoch_date.isoformat() if config.epoch_date else None,
                "include_saturday": config.include_saturday,
            },
        )
        return config

    def clear_all(self) -> None:
        for key in (TASKS_STORAGE_KEY, WEEKLY_LOGS_STORAGE_KEY):
            path = self._blob_path(key)
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise PersistenceError(f"clear {key}", str(exc)) from exc
