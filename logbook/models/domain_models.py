"""Logbook domain models shared by both storage backends."""

import datetime
from dataclasses import dataclass
from typing import NamedTuple

from sqlmodel import Field, SQLModel


# 日本語: 週ログの論理キー (週番号 + 年) / English: Logical key of a compiled week (week number + year)
class WeekKey(NamedTuple):
    week_number: int
    year: int


# 日本語: 週番号の起点と土曜稼働の個人設定 / English: User-scoped settings shaping week numbering and working days
@dataclass(frozen=True)
class WorkWeekConfiguration:
    epoch_date: datetime.date | None = None
    include_saturday: bool = False


# 日本語: ユーザーが記録する1件の作業 / English: One recorded work item
class Task(SQLModel):
    id: str
    content: str
    # 日本語: 日付部分のみが週・日の振り分けに使われる / English: Only the calendar date is used for bucketing
    date: datetime.datetime
    created_at: datetime.datetime
    skills: list[str] = Field(default_factory=list)
    user_id: str | None = None


# 日本語: 週単位でコンパイルされたタスクのスナップショット / English: Point-in-time snapshot of one week's tasks
class WeeklyLog(SQLModel):
    id: str
    week_number: int
    year: int
    start_date: datetime.date
    end_date: datetime.date
    tasks: list[Task] = Field(default_factory=list)
    compiled_at: datetime.datetime
    user_id: str | None = None

    @property
    def key(self) -> WeekKey:
        return WeekKey(self.week_number, self.year)


# 日本語: 表紙に載せる項目 (ロゴは data URL か base64) / English: Cover sheet fields; logos are data URLs or base64
class CoverPageData(SQLModel):
    student_name: str = ""
    student_id: str = ""
    institution: str = ""
    department: str = ""
    company_name: str = ""
    supervisor_name: str = ""
    start_date: datetime.date | None = None
    end_date: datetime.date | None = None
    institution_logo: str | None = None
    company_logo: str | None = None
