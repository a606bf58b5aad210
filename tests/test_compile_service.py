import datetime

from conftest import make_task
from logbook.models import WorkWeekConfiguration
from logbook.services.calendar_service import week_containing
from logbook.services.compile_service import WeeklyLogCompiler, maybe_auto_compile, week_skills
from logbook.services.task_service import TaskService

D = datetime.date


def _seed(store, *tasks):
    for task in tasks:
        store.insert_task(task)


def test_compile_is_an_upsert_per_week(local_store, default_config, clock):
    _seed(local_store, make_task("t1", "Set up repo", D(2024, 3, 4)))
    compiler = WeeklyLogCompiler(local_store, clock=clock)
    week = week_containing(D(2024, 3, 6), default_config)

    first = compiler.compile(week, local_store.list_tasks())
    clock.advance(hours=2)
    _seed(local_store, make_task("t2", "Wrote tests", D(2024, 3, 5)))
    second = compiler.compile(week, local_store.list_tasks())

    logs = local_store.list_weekly_logs()
    assert len(logs) == 1
    assert second.id == first.id
    assert [task.id for task in logs[0].tasks] == ["t1", "t2"]
    assert logs[0].compiled_at == datetime.datetime(2024, 3, 8, 19, 0)
    assert (logs[0].start_date, logs[0].end_date) == (D(2024, 3, 4), D(2024, 3, 10))


def test_compile_same_input_twice_is_idempotent(local_store, default_config, clock):
    _seed(local_store, make_task("t1", "Set up repo", D(2024, 3, 4)))
    compiler = WeeklyLogCompiler(local_store, clock=clock)
    week = week_containing(D(2024, 3, 6), default_config)

    first = compiler.compile(week, local_store.list_tasks())
    second = compiler.compile(week, local_store.list_tasks())

    assert first == second
    assert local_store.list_weekly_logs() == [first]


def test_compiled_log_is_a_snapshot(local_store, default_config, clock):
    _seed(local_store, make_task("t1", "Set up repo", D(2024, 3, 4), skills=["Git"]))
    tasks = local_store.list_tasks()
    week = week_containing(D(2024, 3, 6), default_config)

    WeeklyLogCompiler(local_store, clock=clock).compile(week, tasks)
    tasks[0].skills.append("Docker")
    TaskService(local_store).add_skills("t1", ["Linux"])
    TaskService(local_store).delete("t1")

    log = local_store.list_weekly_logs()[0]
    assert [task.id for task in log.tasks] == ["t1"]
    assert log.tasks[0].skills == ["Git"]


def test_delete_log_leaves_tasks(local_store, default_config, clock):
    _seed(local_store, make_task("t1", "Set up repo", D(2024, 3, 4)))
    compiler = WeeklyLogCompiler(local_store, clock=clock)
    log = compiler.compile(week_containing(D(2024, 3, 6), default_config), local_store.list_tasks())

    compiler.delete(log.id)
    compiler.delete(log.id)

    assert local_store.list_weekly_logs() == []
    assert [task.id for task in local_store.list_tasks()] == ["t1"]


def test_list_logs_orderings(local_store, default_config, clock):
    compiler = WeeklyLogCompiler(local_store, clock=clock)
    later_week = compiler.compile(
        week_containing(D(2024, 3, 13), default_config), [make_task("t2", "Later", D(2024, 3, 13))]
    )
    clock.advance(days=1)
    earlier_week = compiler.compile(
        week_containing(D(2024, 3, 6), default_config), [make_task("t1", "Earlier", D(2024, 3, 6))]
    )

    assert [log.id for log in compiler.list_logs()] == [earlier_week.id, later_week.id]
    assert [log.id for log in compiler.list_logs(newest_first=True)] == [earlier_week.id, later_week.id]
    clock.advance(days=1)
    recompiled = compiler.compile(
        week_containing(D(2024, 3, 13), default_config), [make_task("t2", "Later", D(2024, 3, 13))]
    )
    assert [log.id for log in compiler.list_logs(newest_first=True)] == [recompiled.id, earlier_week.id]


def test_week_skills_first_seen_order():
    tasks = [
        make_task("a", "one", D(2024, 3, 4), skills=["SQL", "Python"]),
        make_task("b", "two", D(2024, 3, 5), skills=["Python", "Docker"]),
    ]
    assert week_skills(tasks) == ["SQL", "Python", "Docker"]


def test_auto_compile_fires_on_friday_once(local_store, default_config, clock):
    _seed(local_store, make_task("t1", "Set up repo", D(2024, 3, 4)))

    log = maybe_auto_compile(local_store, default_config, D(2024, 3, 8), clock=clock)

    assert log is not None
    assert log.start_date == D(2024, 3, 4)
    assert [task.id for task in log.tasks] == ["t1"]
    assert maybe_auto_compile(local_store, default_config, D(2024, 3, 8), clock=clock) is None
    assert len(local_store.list_weekly_logs()) == 1


def test_auto_compile_does_not_fire_before_last_working_day(local_store, default_config, clock):
    _seed(local_store, make_task("t1", "Set up repo", D(2024, 3, 4)))

    assert maybe_auto_compile(local_store, default_config, D(2024, 3, 7), clock=clock) is None
    assert local_store.list_weekly_logs() == []


def test_auto_compile_waits_for_saturday_when_enabled(local_store, clock):
    config = WorkWeekConfiguration(include_saturday=True)
    _seed(local_store, make_task("t1", "Set up repo", D(2024, 3, 4)))

    assert maybe_auto_compile(local_store, config, D(2024, 3, 8), clock=clock) is None
    assert maybe_auto_compile(local_store, config, D(2024, 3, 9), clock=clock) is not None


def test_auto_compile_skips_empty_week(local_store, default_config, clock):
    _seed(local_store, make_task("t1", "Previous week", D(2024, 2, 28)))

    assert maybe_auto_compile(local_store, default_config, D(2024, 3, 8), clock=clock) is None
    assert local_store.list_weekly_logs() == []
