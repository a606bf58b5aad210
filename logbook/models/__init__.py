"""SQLModel exports for the logbook."""

from .domain_models import CoverPageData, Task, WeekKey, WeeklyLog, WorkWeekConfiguration
from .storage_models import TaskRecord, UserSettingsRecord, WeeklyLogRecord

__all__ = [
    "Task",
    "WeeklyLog",
    "WeekKey",
    "WorkWeekConfiguration",
    "CoverPageData",
    "TaskRecord",
    "WeeklyLogRecord",
    "UserSettingsRecord",
]
