"""The task store: the one owner of the in-memory task list.

Every operation takes a single lock that covers both the list and the file it is
saved to, applies its change, rewrites the file, and hands back a deep copy of the
whole list. Callers never get a reference into the live list.
"""

import contextlib
import logging
import threading
import time
import uuid
from collections.abc import Callable, Iterable, Iterator
from functools import lru_cache
from pathlib import Path

from pydantic import ValidationError

from taskdeck.config import get_settings
from taskdeck.exceptions import LockError, PersistenceError
from taskdeck.models.tasks import Task, TaskStats
from taskdeck.persistence import TaskFile
from taskdeck.recurrence import next_occurrence
from taskdeck.services.stats import compute_stats

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def new_task_id() -> str:
    return str(uuid.uuid4())


def _copy_all(tasks: Iterable[Task]) -> list[Task]:
    return [t.model_copy(deep=True) for t in tasks]


class TaskStore:
    def __init__(
        self,
        task_file: TaskFile,
        tasks: Iterable[Task] | None = None,
        *,
        clock: Callable[[], int] = now_ms,
        id_factory: Callable[[], str] = new_task_id,
    ):
        self._lock = threading.Lock()
        self._file = task_file
        self._tasks: list[Task] = _copy_all(tasks or [])
        self._clock = clock
        self._id_factory = id_factory
        self._poisoned = False

    @classmethod
    def open(cls, path: str | Path, **kwargs) -> "TaskStore":
        """Load the store from ``path``.

        A missing file gives an empty list. So does an unreadable one, but that
        case is logged and the bad file is moved aside instead of being overwritten
        by the next save.
        """
        task_file = TaskFile(Path(path))
        try:
            tasks = task_file.load()
        except PersistenceError:
            logger.warning("Could not load saved tasks from %s; starting empty", path, exc_info=True)
            task_file.quarantine()
            tasks = None
        store = cls(task_file, tasks, **kwargs)
        logger.info("TaskStore ready file=%s total=%d", task_file.path, len(store._tasks))
        return store

    @property
    def path(self) -> Path:
        return self._file.path

    # ---- locking / persistence ----

    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            if self._poisoned:
                raise LockError("Failed to lock state")
            try:
                yield
            except PersistenceError:
                # In-memory change stays applied; the file catches up on the next save.
                raise
            except ValidationError:
                # Raised before the list is touched.
                raise
            except Exception:
                self._poisoned = True
                logger.exception("Task store failed while locked; further operations will be refused")
                raise

    def _save(self) -> list[Task]:
        self._file.save(self._tasks)
        return _copy_all(self._tasks)

    # ---- operations ----

    def list_tasks(self) -> list[Task]:
        with self._locked():
            return _copy_all(self._tasks)

    def add_task(self, task: Task) -> list[Task]:
        with self._locked():
            self._tasks.insert(0, task.model_copy(deep=True))
            logger.debug("Task added id=%s", task.id)
            return self._save()

    def toggle_task(self, task_id: str) -> list[Task]:
        """Flip completion of ``task_id``; completing a recurring task appends its next instance."""
        with self._locked():
            follow_up: Task | None = None
            for task in self._tasks:
                if task.id != task_id:
                    continue
                task.completed = not task.completed
                if task.completed:
                    now = self._clock()
                    task.completed_at = now
                    follow_up = self._follow_up(task, now)
                else:
                    task.completed_at = None
                logger.debug("Task toggled id=%s completed=%s", task_id, task.completed)
                break
            # Appended only after the lookup pass is over.
            if follow_up is not None:
                self._tasks.append(follow_up)
            return self._save()

    def _follow_up(self, task: Task, now: int) -> Task | None:
        if task.recurrence_rule is None or task.due_date is None:
            return None
        next_due = next_occurrence(task.recurrence_rule, task.due_date)
        if next_due is None:
            return None
        follow_up = task.model_copy(
            deep=True,
            update={
                "id": self._id_factory(),
                "completed": False,
                "completed_at": None,
                "created_at": now,
                "due_date": next_due,
            },
        )
        logger.info(
            "Recurring task %s completed; next instance %s due_at=%s",
            task.id,
            follow_up.id,
            next_due,
        )
        return follow_up

    def update_task(self, updated: Task) -> list[Task]:
        with self._locked():
            for index, task in enumerate(self._tasks):
                if task.id == updated.id:
                    self._tasks[index] = updated.model_copy(deep=True)
                    logger.debug("Task updated id=%s", updated.id)
                    return self._save()
            return _copy_all(self._tasks)

    def patch_task(self, task_id: str, changes: dict) -> list[Task]:
        """Apply ``changes`` (field name -> value) to the stored task, keeping every other field.

        The read and the write happen under one lock acquisition. Unknown ids leave the
        list and the file untouched.
        """
        with self._locked():
            for index, task in enumerate(self._tasks):
                if task.id == task_id:
                    merged = Task.model_validate({**task.model_dump(), **changes, "id": task_id})
                    self._tasks[index] = merged
                    logger.debug("Task patched id=%s fields=%s", task_id, sorted(changes))
                    return self._save()
            return _copy_all(self._tasks)

    def delete_task(self, task_id: str) -> list[Task]:
        with self._locked():
            self._tasks = [t for t in self._tasks if t.id != task_id]
            logger.debug("Task deleted id=%s", task_id)
            return self._save()

    def reorder_tasks(self, tasks: Iterable[Task]) -> list[Task]:
        """Replace the whole list with ``tasks`` in the given order."""
        with self._locked():
            self._tasks = _copy_all(tasks)
            logger.debug("Tasks reordered total=%d", len(self._tasks))
            return self._save()

    def reset(self) -> list[Task]:
        with self._locked():
            self._tasks = []
            logger.info("All tasks cleared")
            return self._save()

    def stats(self) -> TaskStats:
        with self._locked():
            return compute_stats(self._tasks, self._clock())


@lru_cache
def get_task_store() -> TaskStore:
    return TaskStore.open(get_settings().tasks_file)


# --- Operation surface ---


def new_task(text: str, **fields) -> Task:
    """Build a fresh, incomplete task with a new id, created now."""
    return Task(id=new_task_id(), text=text, completed=False, created_at=now_ms(), **fields)


def list_tasks() -> list[Task]:
    """Return every task in display order."""
    return get_task_store().list_tasks()


def add_task(task: Task) -> list[Task]:
    """Insert a task at the top of the list."""
    return get_task_store().add_task(task)


def toggle_task(task_id: str) -> list[Task]:
    """Toggle completion. Unknown ids leave the list unchanged."""
    return get_task_store().toggle_task(task_id)


def update_task(task: Task) -> list[Task]:
    """Replace the task with the same id in place. Unknown ids leave the list unchanged."""
    return get_task_store().update_task(task)


def patch_task(task_id: str, changes: dict) -> list[Task]:
    """Change only the given fields of a task. Unknown ids leave the list unchanged."""
    return get_task_store().patch_task(task_id, changes)


def delete_task(task_id: str) -> list[Task]:
    return get_task_store().delete_task(task_id)


def reorder_tasks(tasks: list[Task]) -> list[Task]:
    return get_task_store().reorder_tasks(tasks)


def reset_tasks() -> list[Task]:
    return get_task_store().reset()


def task_stats() -> TaskStats:
    return get_task_store().stats()
