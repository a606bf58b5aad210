"""Remote store SQLModel tables."""

import datetime
from typing import Any

from sqlalchemy import JSON, Column, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


# 日本語: ユーザー単位のタスク行 / English: Per-user task row
class TaskRecord(SQLModel, table=True):
    __tablename__ = "task"

    id: str = Field(primary_key=True, max_length=64)
    user_id: str = Field(index=True, max_length=128)
    content: str = Field(sa_column=Column(Text, nullable=False))
    date: datetime.datetime
    created_at: datetime.datetime
    skills: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))


# 日本語: 週ログ行。tasks は JSON に非正規化して保持 / English: Weekly log row; tasks are a denormalized JSON snapshot
class WeeklyLogRecord(SQLModel, table=True):
    __tablename__ = "weekly_log"
    __table_args__ = (
        UniqueConstraint("user_id", "week_number", "year", name="uq_weekly_log_user_week"),
    )

    id: str = Field(primary_key=True, max_length=64)
    user_id: str = Field(index=True, max_length=128)
    week_number: int
    year: int
    start_date: datetime.date
    end_date: datetime.date
    tasks: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    compiled_at: datetime.datetime


# 日本語: 週の数え方の個人設定 / English: Per-user work-week configuration
class UserSettingsRecord(SQLModel, table=True):
    __tablename__ = "user_settings"

    user_id: str = Field(primary_key=True, max_length=128)
    epoch_date: datetime.date | None = Field(default=None)
    include_saturday: bool = Field(default=False)
