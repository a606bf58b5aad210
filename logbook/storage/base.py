"""Persistence adapter contract shared by the remote and local stores."""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

from logbook.models import Task, WeekKey, WeeklyLog, WorkWeekConfiguration


class LogbookStore(Protocol):
    """CRUD surface consumed by the task store and the weekly log compiler.

    Both implementations return the same domain models and raise
    ``PersistenceError`` when the backend fails. ``update_task_skills``
    raises ``NotFoundError`` for an unknown id; the delete operations are
    idempotent.
    """

    user_id: Optional[str]

    def list_tasks(self) -> List[Task]: ...

    def insert_task(self, task: Task) -> Task: ...

    def delete_task(self, task_id: str) -> None: ...

    def update_task_skills(self, task_id: str, skills: Sequence[str]) -> Task: ...

    def list_weekly_logs(self) -> List[WeeklyLog]: ...

    def find_weekly_log(self, key: WeekKey) -> Optional[WeeklyLog]: ...

    def upsert_weekly_log(self, log: WeeklyLog) -> WeeklyLog: ...

    def delete_weekly_log(self, log_id: str) -> None: ...

    def get_settings(self) -> WorkWeekConfiguration: ...

    def save_settings(self, config: WorkWeekConfiguration) -> WorkWeekConfiguration: ...

    def clear_all(self) -> None: ...
