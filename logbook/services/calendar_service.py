"""Calendar and work-week engine.

Every function here is pure: the work-week configuration is passed in
explicitly and nothing reads ambient state, so results depend only on
the arguments.
"""

from __future__ import annotations

import datetime
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from logbook.core.errors import ValidationError
from logbook.models import Task, WeekKey, WorkWeekConfiguration

# 日本語: date.weekday() の値 (0=月 ... 6=日) / English: date.weekday() values (0=Mon ... 6=Sun)
FRIDAY = 4
SATURDAY = 5
SUNDAY = 6

DAY_KEY_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class WeekDescriptor:
    start_date: datetime.date
    end_date: datetime.date
    week_number: int
    year: int
    # 日本語: 前後週の計算に使う参照日。比較対象外 / English: Date the week was looked up from; excluded from equality
    reference_date: datetime.date = field(compare=False)

    @property
    def key(self) -> WeekKey:
        return WeekKey(self.week_number, self.year)


def to_date(value: datetime.date | datetime.datetime) -> datetime.date:
    if isinstance(value, datetime.datetime):
        # 日本語: タイムゾーン付きはローカル時刻へ変換してから日付を取る / English: Aware instants are read in local time
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, datetime.date):
        return value
    raise ValidationError(f"Expected a date, got {type(value).__name__}")


def start_of_week(value: datetime.date | datetime.datetime) -> datetime.date:
    day = to_date(value)
    return day - datetime.timedelta(days=day.weekday())


def calendar_week_number(value: datetime.date | datetime.datetime) -> int:
    """Sunday-aligned week-of-year used when no epoch is configured."""
    day = to_date(value)
    first_day_of_year = datetime.date(day.year, 1, 1)
    past_days_of_year = (day - first_day_of_year).days
    # 日本語: 元日の曜日を日曜=0 で数える / English: Weekday of Jan 1 counted with Sunday=0
    first_weekday = (first_day_of_year.weekday() + 1) % 7
    return math.ceil((past_days_of_year + first_weekday + 1) / 7)


def week_number_for(value: datetime.date | datetime.datetime, config: WorkWeekConfiguration) -> int:
    day = to_date(value)
    if config.epoch_date is None:
        return calendar_week_number(day)
    weeks_since_epoch = (start_of_week(day) - start_of_week(config.epoch_date)).days // 7
    return max(1, weeks_since_epoch + 1)


def week_containing(
    value: datetime.date | datetime.datetime,
    config: WorkWeekConfiguration,
) -> WeekDescriptor:
    """Monday-to-Sunday week holding ``value``, numbered per ``config``."""
    day = to_date(value)
    start = start_of_week(day)
    return WeekDescriptor(
        start_date=start,
        end_date=start + datetime.timedelta(days=6),
        week_number=week_number_for(day, config),
        year=day.year,
        reference_date=day,
    )


def current_week(config: WorkWeekConfiguration, today: datetime.date | None = None) -> WeekDescriptor:
    return week_containing(today or datetime.date.today(), config)


def previous_week(week: WeekDescriptor, config: WorkWeekConfiguration) -> WeekDescriptor:
    return week_containing(week.reference_date - datetime.timedelta(days=7), config)


def next_week(week: WeekDescriptor, config: WorkWeekConfiguration) -> WeekDescriptor:
    return week_containing(week.reference_date + datetime.timedelta(days=7), config)


def is_working_day(value: datetime.date | datetime.datetime, config: WorkWeekConfiguration) -> bool:
    weekday = to_date(value).weekday()
    if weekday == SUNDAY:
        return False
    if weekday == SATURDAY:
        return config.include_saturday
    return True


def working_days(week: WeekDescriptor, config: WorkWeekConfiguration) -> List[datetime.date]:
    span = (week.end_date - week.start_date).days
    days = (week.start_date + datetime.timedelta(days=offset) for offset in range(span + 1))
    return [day for day in days if is_working_day(day, config)]


def last_working_day(config: WorkWeekConfiguration) -> int:
    """Weekday index that closes the configured work week."""
    return SATURDAY if config.include_saturday else FRIDAY


def is_date_in_week(value: datetime.date | datetime.datetime, week: WeekDescriptor) -> bool:
    return week.start_date <= to_date(value) <= week.end_date


def day_key(value: datetime.date | datetime.datetime) -> str:
    return to_date(value).strftime(DAY_KEY_FORMAT)


def parse_day_key(key: str) -> datetime.date:
    try:
        return datetime.datetime.strptime((key or "").strip(), DAY_KEY_FORMAT).date()
    except ValueError:
        raise ValidationError(f"Invalid date format: {key!r} (expected YYYY-MM-DD)")


def week_string_identifier(week: WeekDescriptor) -> str:
    return f"week-{week.year}-{week.week_number}"


def format_date(value: datetime.date | datetime.datetime, *, with_weekday: bool = False) -> str:
    """Long human date, e.g. "March 5, 2024" or "Tuesday, March 5, 2024"."""
    day = to_date(value)
    text = f"{day:%B} {day.day}, {day.year}"
    return f"{day:%A}, {text}" if with_weekday else text


def format_week_range(start: datetime.date, end: datetime.date) -> str:
    # 日本語: 同月なら "Mar 4-10, 2024"、跨ぐ場合は "Feb 26 - Mar 3, 2024" / English: Collapse the month when both ends share it
    if (start.year, start.month) == (end.year, end.month):
        return f"{start:%b} {start.day}-{end.day}, {end.year}"
    return f"{start:%b} {start.day} - {end:%b} {end.day}, {end.year}"


def group_by_day(tasks: Iterable[Task]) -> "OrderedDict[str, List[Task]]":
    """Group tasks by calendar day, days ascending, input order kept within a day."""
    grouped: "OrderedDict[str, List[Task]]" = OrderedDict()
    for task in sorted(tasks, key=lambda item: day_key(item.date)):
        grouped.setdefault(day_key(task.date), []).append(task)
    return grouped


def tasks_by_working_day(
    tasks: Sequence[Task],
    week: WeekDescriptor,
    config: WorkWeekConfiguration,
) -> "OrderedDict[str, List[Task]]":
    grouped: "OrderedDict[str, List[Task]]" = OrderedDict(
        (day_key(day), []) for day in working_days(week, config)
    )
    for task in tasks:
        bucket = grouped.get(day_key(task.date))
        if bucket is not None:
            bucket.append(task)
    return grouped


__all__ = [
    "WorkWeekConfiguration",
    "WeekDescriptor",
    "to_date",
    "start_of_week",
    "calendar_week_number",
    "week_number_for",
    "week_containing",
    "current_week",
    "previous_week",
    "next_week",
    "is_working_day",
    "working_days",
    "last_working_day",
    "is_date_in_week",
    "day_key",
    "parse_day_key",
    "week_string_identifier",
    "format_date",
    "format_week_range",
    "group_by_day",
    "tasks_by_working_day",
]
