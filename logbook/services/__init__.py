"""Service-layer exports."""

from .calendar_service import (
    WeekDescriptor,
    WorkWeekConfiguration,
    current_week,
    day_key,
    is_working_day,
    next_week,
    previous_week,
    week_containing,
    working_days,
)
from .compile_service import WeeklyLogCompiler, maybe_auto_compile, week_skills
from .report_service import build_table_rows, render, report_filename
from .task_service import TaskService

__all__ = [
    "WeekDescriptor",
    "WorkWeekConfiguration",
    "current_week",
    "day_key",
    "is_working_day",
    "next_week",
    "previous_week",
    "week_containing",
    "working_days",
    "WeeklyLogCompiler",
    "maybe_auto_compile",
    "week_skills",
    "TaskService",
    "build_table_rows",
    "render",
    "report_filename",
]
