"""JSON file persistence for the task list.

The whole collection is rewritten on every save; there is no journal. A write
goes to a sibling temp file first and is then moved over the target, so a crash
mid-write leaves the previous file intact.
"""

import logging
import os
import time
from collections.abc import Sequence
from pathlib import Path

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from taskdeck.exceptions import PersistenceError
from taskdeck.models.tasks import Task

logger = logging.getLogger(__name__)

_collection = TypeAdapter(list[Task])


class TaskFile:
    """Reads/writes the ordered task list to a single JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> list[Task] | None:
        """Return the saved tasks, or None if nothing has been saved yet.

        Raises PersistenceError when the file exists but cannot be read or does
        not validate; a single bad field rejects the whole file.
        """
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e
        try:
            return _collection.validate_json(raw)
        except ValidationError as e:
            raise PersistenceError(
                f"Saved tasks in {self.path} are invalid ({e.error_count()} error(s))"
            ) from e

    def save(self, tasks: Sequence[Task]) -> None:
        try:
            data = _collection.dump_json(list(tasks), indent=2, by_alias=True, exclude_none=True)
        except PydanticSerializationError as e:
            raise PersistenceError(f"Failed to encode tasks: {e}") from e
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(data)
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {self.path}: {e}") from e
        logger.debug("Saved %d task(s) to %s", len(tasks), self.path)

    def quarantine(self) -> Path | None:
        """Move an unreadable file aside so the next save cannot overwrite it."""
        target = self.path.with_name(f"{self.path.name}.corrupt-{time.strftime('%Y%m%d%H%M%S')}")
        try:
            os.replace(self.path, target)
        except OSError:
            logger.warning("Could not move unreadable task file %s aside", self.path, exc_info=True)
            return None
        logger.warning("Unreadable task file kept as %s", target)
        return target
