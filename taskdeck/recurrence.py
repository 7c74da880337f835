"""Next-occurrence arithmetic for recurring tasks.

Timestamps are UTC milliseconds since the epoch, the same unit the task file and
the GUI use. Nothing here touches the store; it is safe to call from anywhere.
"""

from datetime import date, datetime, timedelta, timezone

from taskdeck.models.tasks import DAILY, MONTHLY, WEEKLY, RecurrenceRule

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


def from_millis(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=ms)


def to_millis(dt: datetime) -> int:
    return (dt - EPOCH) // _ONE_MS


def days_in_month(year: int, month: int) -> int:
    """Number of days in ``month`` of ``year``, read off the calendar itself."""
    if month == 12:
        first_of_next = date(year + 1, 1, 1)
    else:
        first_of_next = date(year, month + 1, 1)
    return (first_of_next - timedelta(days=1)).day


def add_months(dt: datetime, months: int) -> datetime:
    """Advance ``dt`` by ``months`` calendar months, clamping the day to the target month."""
    # 1-based rollover: month 13 is January of the following year.
    years, month_index = divmod(dt.month - 1 + months, 12)
    year = dt.year + years
    month = month_index + 1
    day = min(dt.day, days_in_month(year, month))
    return dt.replace(year=year, month=month, day=day)


def next_occurrence(rule: RecurrenceRule, anchor_ms: int) -> int | None:
    """Return the due date that follows ``anchor_ms`` under ``rule``.

    Returns None for an unknown frequency, or when the anchor or the result falls outside
    the representable calendar. ``week_days`` and ``month_days`` are not consulted.
    """
    try:
        anchor = from_millis(anchor_ms)
        if rule.freq == DAILY:
            nxt = anchor + timedelta(days=rule.interval)
        elif rule.freq == WEEKLY:
            nxt = anchor + timedelta(weeks=rule.interval)
        elif rule.freq == MONTHLY:
            nxt = add_months(anchor, rule.interval)
        else:
            return None
    except (OverflowError, ValueError):
        return None
    return to_millis(nxt)
