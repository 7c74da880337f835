from datetime import datetime, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient

from taskdeck.models.tasks import Task
from taskdeck.services.tasks import TaskStore


def ms(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> int:
    """UTC calendar time -> milliseconds since epoch."""
    return int(datetime(year, month, day, hour, minute, tzinfo=timezone.utc).timestamp()) * 1000


NOW_MS = ms(2024, 2, 1, 9, 30)


def make_task(id: str = "t1", text: str = "Water the plants", **fields) -> Task:
    fields.setdefault("completed", False)
    fields.setdefault("created_at", ms(2024, 1, 1))
    return Task(id=id, text=text, **fields)


# --- Canned zipcloud responses ---

ZIPCLOUD_OK = {
    "message": None,
    "results": [
        {
            "address1": "東京都",
            "address2": "千代田区",
            "address3": "千代田",
            "kana1": "ﾄｳｷｮｳﾄ",
            "kana2": "ﾁﾖﾀﾞｸ",
            "kana3": "ﾁﾖﾀﾞ",
            "prefcode": "13",
            "zipcode": "1000001",
        }
    ],
    "status": 200,
}

ZIPCLOUD_NO_RESULTS = {"message": None, "results": None, "status": 200}

ZIPCLOUD_BAD_PARAM = {
    "message": "パラメータ「郵便番号」の桁数が不正です。",
    "results": None,
    "status": 400,
}

# Rows in utf_ken_all.csv layout (only columns 2, 6 and 7 matter).
KEN_ALL_ROWS = [
    ["13101", "100  ", "1000001", "ﾄｳｷｮｳﾄ", "ﾁﾖﾀﾞｸ", "ﾁﾖﾀﾞ", "東京都", "千代田区", "千代田", "0", "0", "0", "0", "0", "0"],
    ["27128", "540  ", "5400002", "ｵｵｻｶﾌ", "ｵｵｻｶｼﾁﾕｳｵｳｸ", "ｵｵｻｶｼﾞｮｳ", "大阪府", "大阪市中央区", "大阪城", "0", "0", "0", "0", "0", "0"],
]


@pytest.fixture
def tasks_path(tmp_path):
    return tmp_path / "data" / "tasks.json"


@pytest.fixture
def id_factory():
    counter = count(1)
    return lambda: f"new-{next(counter)}"


@pytest.fixture
def store(tasks_path, id_factory):
    """Store on a fresh temp file with a frozen clock and predictable ids."""
    return TaskStore.open(tasks_path, clock=lambda: NOW_MS, id_factory=id_factory)


@pytest.fixture
def api_client():
    """FastAPI TestClient for router tests."""
    from taskdeck.main import api
    return TestClient(api)
