from collections import Counter
from collections.abc import Iterable
from datetime import timedelta

from taskdeck.models.tasks import DailyCount, Task, TaskStats
from taskdeck.recurrence import from_millis

WEEK_DAYS = 7


def compute_stats(tasks: Iterable[Task], now_ms: int) -> TaskStats:
    """Completion totals plus completions per UTC day over the last week (oldest first)."""
    tasks = list(tasks)
    total = len(tasks)
    completed = sum(1 for t in tasks if t.completed)
    rate = round(completed * 100 / total) if total else 0

    done_per_day = Counter(
        from_millis(t.completed_at).date()
        for t in tasks
        if t.completed and t.completed_at is not None
    )
    today = from_millis(now_ms).date()
    days = [today - timedelta(days=offset) for offset in range(WEEK_DAYS - 1, -1, -1)]

    return TaskStats(
        total=total,
        completed=completed,
        active=total - completed,
        completion_rate=rate,
        weekly_activity=[DailyCount(date=d.isoformat(), count=done_per_day[d]) for d in days],
    )
