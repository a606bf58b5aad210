import datetime

import pytest

from conftest import make_task
from logbook.core.errors import ValidationError
from logbook.models import WeekKey, WorkWeekConfiguration
from logbook.services.calendar_service import (
    FRIDAY,
    SATURDAY,
    calendar_week_number,
    current_week,
    day_key,
    format_date,
    format_week_range,
    group_by_day,
    is_date_in_week,
    is_working_day,
    last_working_day,
    next_week,
    parse_day_key,
    previous_week,
    tasks_by_working_day,
    to_date,
    week_containing,
    week_number_for,
    week_string_identifier,
    working_days,
)

D = datetime.date


def test_week_containing_is_monday_to_sunday(default_config):
    week = week_containing(D(2024, 3, 6), default_config)

    assert week.start_date == D(2024, 3, 4)
    assert week.end_date == D(2024, 3, 10)
    assert week.year == 2024
    assert week.key == WeekKey(week.week_number, 2024)


def test_every_day_of_a_week_maps_to_the_same_week(default_config):
    weeks = {
        week_containing(D(2024, 3, 4) + datetime.timedelta(days=offset), default_config)
        for offset in range(7)
    }
    assert len(weeks) == 1


def test_week_lookup_ignores_time_of_day(default_config):
    morning = week_containing(datetime.datetime(2024, 3, 10, 0, 1), default_config)
    night = week_containing(datetime.datetime(2024, 3, 10, 23, 59), default_config)
    assert morning == night
    assert morning.start_date == D(2024, 3, 4)


def test_week_number_counts_from_epoch():
    config = WorkWeekConfiguration(epoch_date=D(2024, 1, 1))

    assert week_number_for(D(2024, 1, 1), config) == 1
    assert week_number_for(D(2024, 1, 7), config) == 1
    assert week_number_for(D(2024, 1, 8), config) == 2
    assert week_number_for(D(2024, 1, 15), config) == 3


def test_week_number_uses_epoch_week_start_not_epoch_day():
    # 日本語: 起点が水曜でもその週の月曜から数える / English: A mid-week epoch still anchors on its Monday
    config = WorkWeekConfiguration(epoch_date=D(2024, 1, 3))

    assert week_number_for(D(2024, 1, 1), config) == 1
    assert week_number_for(D(2024, 1, 8), config) == 2


def test_dates_before_epoch_are_clamped_to_week_one():
    config = WorkWeekConfiguration(epoch_date=D(2024, 3, 4))
    assert week_number_for(D(2024, 1, 15), config) == 1


def test_calendar_week_number_without_epoch():
    # 日本語: 2024-01-01 は月曜。日曜始まりで数える / English: 2024-01-01 is a Monday; weeks turn over on Sunday
    assert calendar_week_number(D(2024, 1, 1)) == 1
    assert calendar_week_number(D(2024, 1, 6)) == 1
    assert calendar_week_number(D(2024, 1, 7)) == 2
    assert calendar_week_number(D(2024, 3, 6)) == 10


def test_week_year_comes_from_reference_date(default_config):
    week = week_containing(D(2025, 1, 1), default_config)

    assert week.start_date == D(2024, 12, 30)
    assert week.year == 2025


def test_previous_and_next_round_trip(default_config):
    week = week_containing(D(2024, 3, 6), default_config)

    assert previous_week(next_week(week, default_config), default_config) == week
    assert next_week(previous_week(week, default_config), default_config) == week
    assert next_week(week, default_config).start_date == D(2024, 3, 11)
    assert previous_week(week, default_config).start_date == D(2024, 2, 26)


def test_navigation_crosses_year_boundary(default_config):
    week = week_containing(D(2024, 12, 31), default_config)
    following = next_week(week, default_config)

    assert following.start_date == D(2025, 1, 6)
    assert following.year == 2025
    assert previous_week(following, default_config) == week


def test_current_week_uses_given_today(default_config):
    assert current_week(default_config, D(2024, 3, 8)).start_date == D(2024, 3, 4)


def test_working_days_default_is_monday_to_friday(default_config):
    week = week_containing(D(2024, 3, 6), default_config)
    assert working_days(week, default_config) == [D(2024, 3, day) for day in range(4, 9)]


def test_working_days_with_saturday():
    config = WorkWeekConfiguration(include_saturday=True)
    week = week_containing(D(2024, 3, 6), config)

    assert working_days(week, config) == [D(2024, 3, day) for day in range(4, 10)]


def test_sunday_is_never_a_working_day():
    assert is_working_day(D(2024, 3, 10), WorkWeekConfiguration()) is False
    assert is_working_day(D(2024, 3, 10), WorkWeekConfiguration(include_saturday=True)) is False
    assert is_working_day(D(2024, 3, 9), WorkWeekConfiguration()) is False
    assert is_working_day(D(2024, 3, 9), WorkWeekConfiguration(include_saturday=True)) is True


def test_last_working_day_follows_saturday_setting():
    assert last_working_day(WorkWeekConfiguration()) == FRIDAY
    assert last_working_day(WorkWeekConfiguration(include_saturday=True)) == SATURDAY


def test_is_date_in_week_is_inclusive(default_config):
    week = week_containing(D(2024, 3, 6), default_config)

    assert is_date_in_week(D(2024, 3, 4), week)
    assert is_date_in_week(datetime.datetime(2024, 3, 10, 23, 0), week)
    assert not is_date_in_week(D(2024, 3, 11), week)


def test_day_key_and_parse_day_key():
    assert day_key(datetime.datetime(2024, 3, 6, 14, 30)) == "2024-03-06"
    assert parse_day_key("2024-03-06") == D(2024, 3, 6)


@pytest.mark.parametrize("raw", ["", "2024-13-01", "06/03/2024", "not-a-date"])
def test_parse_day_key_rejects_invalid_input(raw):
    with pytest.raises(ValidationError):
        parse_day_key(raw)


def test_to_date_rejects_non_dates():
    with pytest.raises(ValidationError):
        to_date("2024-03-06")


def test_week_string_identifier(default_config):
    week = week_containing(D(2024, 3, 6), default_config)
    assert week_string_identifier(week) == "week-2024-10"


def test_format_week_range():
    assert format_week_range(D(2024, 3, 4), D(2024, 3, 10)) == "Mar 4-10, 2024"
    assert format_week_range(D(2024, 2, 26), D(2024, 3, 3)) == "Feb 26 - Mar 3, 2024"
    assert format_week_range(D(2024, 12, 30), D(2025, 1, 5)) == "Dec 30 - Jan 5, 2025"


def test_group_by_day_orders_days_and_keeps_input_order():
    tasks = [
        make_task("a", "second day, first", datetime.datetime(2024, 3, 5, 16, 0)),
        make_task("b", "first day", datetime.datetime(2024, 3, 4, 9, 0)),
        make_task("c", "second day, second", datetime.datetime(2024, 3, 5, 8, 0)),
    ]

    grouped = group_by_day(tasks)

    assert list(grouped) == ["2024-03-04", "2024-03-05"]
    assert [task.id for task in grouped["2024-03-05"]] == ["a", "c"]


def test_tasks_by_working_day_skips_weekend_tasks(default_config):
    week = week_containing(D(2024, 3, 6), default_config)
    tasks = [
        make_task("a", "Monday", D(2024, 3, 4)),
        make_task("b", "Sunday", D(2024, 3, 10)),
    ]

    grouped = tasks_by_working_day(tasks, week, default_config)

    assert list(grouped) == ["2024-03-04", "2024-03-05", "2024-03-06", "2024-03-07", "2024-03-08"]
    assert [task.id for task in grouped["2024-03-04"]] == ["a"]
    assert all(not grouped[key] for key in list(grouped)[1:])


def test_format_date_long_form():
    assert format_date(D(2024, 3, 5)) == "March 5, 2024"
    assert format_date(datetime.datetime(2024, 3, 5, 23, 0), with_weekday=True) == "Tuesday, March 5, 2024"
