from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Wire and file format use camelCase keys (createdAt, dueDate, recurrenceRule, ...).
_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)

Priority = Literal["high", "medium", "low"]

DAILY = "daily"
WEEKLY = "weekly"
MONTHLY = "monthly"

# 9999-12-31T23:59:59.999Z, the last instant datetime can represent.
MAX_TIMESTAMP_MS = 253_402_300_799_999

Timestamp = Annotated[int, Field(ge=0, le=MAX_TIMESTAMP_MS)]


class RecurrenceRule(BaseModel):
    model_config = _CAMEL

    freq: str  # "daily", "weekly" or "monthly"; anything else never recurs
    interval: int = Field(ge=1)
    week_days: list[int] | None = None  # 0=Sun, reserved
    month_days: list[int] | None = None  # 1-31, reserved


class Subtask(BaseModel):
    id: str
    text: str
    completed: bool = False


class Task(BaseModel):
    """A single to-do item.

    Timestamps are milliseconds since the Unix epoch (UTC). ``completed_at`` is
    set exactly while ``completed`` is true; the store keeps that in sync.
    """

    model_config = _CAMEL

    id: str
    text: str
    completed: bool
    created_at: Timestamp
    completed_at: Timestamp | None = None

    due_date: Timestamp | None = None
    include_time: bool = False
    notification_offset: int | None = None  # minutes before due date, -1 = off

    priority: Priority | None = None
    tags: list[str] = []
    subtasks: list[Subtask] = []
    notes: str | None = None

    recurrence_rule: RecurrenceRule | None = None

    attachments: list[str] = []


class DailyCount(BaseModel):
    date: str  # YYYY-MM-DD (UTC)
    count: int


class TaskStats(BaseModel):
    total: int
    completed: int
    active: int
    completion_rate: int  # percent, rounded
    weekly_activity: list[DailyCount]
