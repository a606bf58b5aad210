import datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session, SQLModel, create_engine, select
from sqlmodel.pool import StaticPool

from conftest import make_task
from logbook.core.errors import NotFoundError, PersistenceError
from logbook.models import WeekKey, WeeklyLog, WeeklyLogRecord, WorkWeekConfiguration
from logbook.storage import JsonFileStore, SqlStore, select_store

D = datetime.date


@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


def _log(log_id, week_number=10, tasks=()):
    return WeeklyLog(
        id=log_id,
        week_number=week_number,
        year=2024,
        start_date=D(2024, 3, 4),
        end_date=D(2024, 3, 10),
        tasks=list(tasks),
        compiled_at=datetime.datetime(2024, 3, 8, 17, 0),
    )


class _FailingDb:
    def __init__(self):
        self.rollback_count = 0

    def exec(self, statement):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    def get(self, _model, _identifier):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    def rollback(self):
        self.rollback_count += 1


def test_tasks_are_scoped_per_user(db):
    alice = SqlStore(db, "alice")
    bob = SqlStore(db, "bob")

    alice.insert_task(make_task("t1", "Alice task", D(2024, 3, 4)))
    bob.insert_task(make_task("t2", "Bob task", D(2024, 3, 4)))

    assert [task.id for task in alice.list_tasks()] == ["t1"]
    assert [task.id for task in bob.list_tasks()] == ["t2"]
    assert alice.list_tasks()[0].user_id == "alice"

    bob.delete_task("t1")
    assert [task.id for task in alice.list_tasks()] == ["t1"]


def test_update_task_skills(db):
    store = SqlStore(db, "alice")
    store.insert_task(make_task("t1", "Built API", D(2024, 3, 4)))

    updated = store.update_task_skills("t1", ["Python", "SQL"])

    assert updated.skills == ["Python", "SQL"]
    assert store.list_tasks()[0].skills == ["Python", "SQL"]


def test_update_task_skills_of_other_user_is_not_found(db):
    SqlStore(db, "alice").insert_task(make_task("t1", "Built API", D(2024, 3, 4)))

    with pytest.raises(NotFoundError):
        SqlStore(db, "bob").update_task_skills("t1", ["Python"])


def test_upsert_weekly_log_keeps_one_row_per_week(db):
    store = SqlStore(db, "alice")
    store.upsert_weekly_log(_log("log-1"))
    stored = store.upsert_weekly_log(_log("log-2", tasks=[make_task("t1", "Built API", D(2024, 3, 4))]))

    rows = db.exec(select(WeeklyLogRecord)).all()
    assert len(rows) == 1
    assert stored.id == "log-1"
    assert [task.id for task in stored.tasks] == ["t1"]
    assert store.find_weekly_log(WeekKey(10, 2024)).id == "log-1"


def test_same_week_for_two_users_is_two_logs(db):
    SqlStore(db, "alice").upsert_weekly_log(_log("log-a"))
    SqlStore(db, "bob").upsert_weekly_log(_log("log-b"))

    assert [log.id for log in SqlStore(db, "alice").list_weekly_logs()] == ["log-a"]
    assert [log.id for log in SqlStore(db, "bob").list_weekly_logs()] == ["log-b"]


def test_delete_weekly_log_is_idempotent(db):
    store = SqlStore(db, "alice")
    store.upsert_weekly_log(_log("log-1"))

    store.delete_weekly_log("log-1")
    store.delete_weekly_log("log-1")

    assert store.list_weekly_logs() == []


def test_settings_default_and_round_trip(db):
    store = SqlStore(db, "alice")
    assert store.get_settings() == WorkWeekConfiguration()

    config = WorkWeekConfiguration(epoch_date=D(2024, 1, 1), include_saturday=True)
    store.save_settings(config)

    assert store.get_settings() == config
    assert SqlStore(db, "bob").get_settings() == WorkWeekConfiguration()


def test_clear_all_only_touches_own_rows(db):
    alice = SqlStore(db, "alice")
    bob = SqlStore(db, "bob")
    alice.insert_task(make_task("t1", "Alice task", D(2024, 3, 4)))
    bob.insert_task(make_task("t2", "Bob task", D(2024, 3, 4)))

    alice.clear_all()

    assert alice.list_tasks() == []
    assert [task.id for task in bob.list_tasks()] == ["t2"]


def test_database_failures_become_persistence_errors():
    fake_db = _FailingDb()
    store = SqlStore(fake_db, "alice")

    with pytest.raises(PersistenceError) as excinfo:
        store.list_tasks()

    assert excinfo.value.operation == "list_tasks"
    assert fake_db.rollback_count == 1
    with pytest.raises(PersistenceError):
        store.get_settings()


def test_select_store_picks_backend_from_auth_state(db, tmp_path):
    assert isinstance(select_store("alice", db=db), SqlStore)
    assert isinstance(select_store(None, local_dir=tmp_path), JsonFileStore)
    with pytest.raises(ValueError):
        select_store("alice")


def test_database_url_normalization():
    from logbook.core.db import _normalize_database_url

    assert _normalize_database_url("postgres://u:p@host/db") == "postgresql+psycopg2://u:p@host/db"
    assert _normalize_database_url("sqlite:///logbook.db") == "sqlite:///logbook.db"
    with pytest.raises(ValueError):
        _normalize_database_url("mysql://u:p@host/db")
