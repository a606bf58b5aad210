import datetime
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# 日本語: logbook 読み込み前にテスト用の環境変数を設定 / English: Test env must be in place before logbook is imported
os.environ.setdefault("SESSION_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from logbook.models import Task, WorkWeekConfiguration  # noqa: E402
from logbook.storage import JsonFileStore  # noqa: E402


def make_task(task_id, content, when, skills=None, user_id=None):
    if isinstance(when, datetime.date) and not isinstance(when, datetime.datetime):
        when = datetime.datetime.combine(when, datetime.time(9, 0))
    return Task(
        id=task_id,
        content=content,
        date=when,
        created_at=when,
        skills=list(skills or []),
        user_id=user_id,
    )


class FixedClock:
    def __init__(self, start=datetime.datetime(2024, 3, 8, 17, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + datetime.timedelta(**kwargs)


@pytest.fixture()
def local_store(tmp_path):
    return JsonFileStore(tmp_path / "local_store")


@pytest.fixture()
def default_config():
    return WorkWeekConfiguration()


@pytest.fixture()
def clock():
    return FixedClock()
