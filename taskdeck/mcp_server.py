from fastmcp import FastMCP

from taskdeck.exceptions import (
    IntegrationError,
    LockError,
    NetworkError,
    PersistenceError,
    RateLimitError,
)
from taskdeck.models.tasks import Task
from taskdeck.services import postal as postal_service
from taskdeck.services import tasks as tasks_service

mcp = FastMCP("Taskdeck")

_ERRORS = (LockError, PersistenceError, IntegrationError, RateLimitError)


def _handle_mcp_error(e: Exception) -> dict:
    """Convert exceptions to agent-friendly error dicts."""
    if isinstance(e, LockError):
        return {"error": "lock_error", "message": str(e), "action": "Restart the application"}
    if isinstance(e, PersistenceError):
        return {"error": "persistence_error", "message": str(e)}
    if isinstance(e, NetworkError):
        return {"error": "network_error", "message": str(e), "action": "Check the connection and retry"}
    if isinstance(e, RateLimitError):
        return {"error": "rate_limit", "message": str(e), "action": "Wait a moment and retry"}
    if isinstance(e, IntegrationError):
        return {"error": "integration_error", "message": str(e)}
    return {"error": "unknown_error", "message": str(e)}


def _snapshot(tasks: list[Task]) -> dict:
    return {
        "tasks": [t.model_dump(by_alias=True, exclude_none=True) for t in tasks],
        "count": len(tasks),
    }


# --- Task tools ---

@mcp.tool
def task_list() -> dict:
    """List all tasks in display order. Each task has id, text, completed, createdAt (ms since epoch)
    and optional dueDate, priority, tags, notes and recurrenceRule."""
    try:
        return _snapshot(tasks_service.list_tasks())
    except _ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def task_add(
    text: str,
    due_date: int | None = None,
    priority: str | None = None,
    tags: list[str] | None = None,
    notes: str | None = None,
    recurrence_freq: str | None = None,
    recurrence_interval: int = 1,
) -> dict:
    """Add a new task at the top of the list. due_date is milliseconds since epoch (UTC).
    priority is 'high', 'medium' or 'low'. recurrence_freq is 'daily', 'weekly' or 'monthly';
    a recurring task needs a due_date and spawns its next instance when completed."""
    fields: dict = {"due_date": due_date, "priority": priority, "tags": tags or [], "notes": notes}
    if recurrence_freq:
        fields["recurrence_rule"] = {"freq": recurrence_freq, "interval": recurrence_interval}
    try:
        task = tasks_service.new_task(text, **fields)
        return _snapshot(tasks_service.add_task(task))
    except _ERRORS as e:
        return _handle_mcp_error(e)
    except ValueError as e:
        return {"error": "invalid_task", "message": str(e)}


@mcp.tool
def task_toggle(task_id: str) -> dict:
    """Toggle a task between completed and not completed. Completing a recurring task
    appends its next occurrence to the end of the list."""
    try:
        return _snapshot(tasks_service.toggle_task(task_id))
    except _ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def task_update(
    task_id: str,
    text: str | None = None,
    notes: str | None = None,
    priority: str | None = None,
    due_date: int | None = None,
    tags: list[str] | None = None,
) -> dict:
    """Update an existing task. Only provided fields are changed; the task keeps its position.
    An unknown task_id changes nothing and returns the current list."""
    changes = {"text": text, "notes": notes, "priority": priority, "due_date": due_date, "tags": tags}
    try:
        return _snapshot(tasks_service.patch_task(task_id, {k: v for k, v in changes.items() if v is not None}))
    except _ERRORS as e:
        return _handle_mcp_error(e)
    except ValueError as e:
        return {"error": "invalid_task", "message": str(e)}


@mcp.tool
def task_delete(task_id: str) -> dict:
    """Delete a task by id."""
    try:
        return _snapshot(tasks_service.delete_task(task_id))
    except _ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def task_stats() -> dict:
    """Completion statistics: totals, completion rate in percent, and completions per day for the last 7 days."""
    try:
        return tasks_service.task_stats().model_dump()
    except _ERRORS as e:
        return _handle_mcp_error(e)


# --- Postal tools ---

@mcp.tool
def postal_lookup_address(zipcode: str) -> dict:
    """Look up the full address for a Japanese postal code (e.g. '100-0001')."""
    try:
        return postal_service.lookup_address(zipcode).model_dump()
    except _ERRORS as e:
        return _handle_mcp_error(e)


@mcp.tool
def postal_lookup_region(zipcode: str) -> dict:
    """Prefecture and city for a Japanese postal code, from the local reference table."""
    return postal_service.lookup_region(zipcode).model_dump()
