"""
JSON Snapshot Storage

Keeps every user's events in one JSON file, the same "persisted
snapshot" the web client kept in local storage:

    {"version": 1, "users": {"<user_id>": [<event record>, ...]}}

Records use the camelCase shape from CalendarEvent.to_record().

TRADEOFFS:
- Whole-file rewrite on every change (fine for personal use)
- No cross-process locking; one host process owns the file

Writes go to a temp file first and are swapped in with os.replace, so
a crash never leaves a half-written snapshot.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from paycal.models.event import CalendarEvent
from paycal.services.storage.interface import (
    EventStorageInterface,
    StorageError,
    ensure_unique_ids,
)


SNAPSHOT_VERSION = 1


class JsonFileEventStorage(EventStorageInterface):
    """Event storage backed by a single JSON snapshot file."""

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        reraise=True,
    )
    def _read_snapshot(self) -> dict:
        if not self._path.exists():
            return {"version": SNAPSHOT_VERSION, "users": {}}
        with self._path.open("r", encoding="utf-8") as f:
            return json.load(f)

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
        reraise=True,
    )
    def _write_snapshot(self, snapshot: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, indent=2)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _load(self) -> dict:
        try:
            snapshot = self._read_snapshot()
        except OSError as e:
            raise StorageError(f"Failed to read snapshot {self._path}: {e}")
        except json.JSONDecodeError as e:
            raise StorageError(f"Snapshot {self._path} is not valid JSON: {e}")

        if not isinstance(snapshot, dict) or not isinstance(snapshot.get("users"), dict):
            raise StorageError(f"Snapshot {self._path} has an unexpected layout")
        return snapshot

    async def list_events(self, user_id: str) -> list[CalendarEvent]:
        records = self._load()["users"].get(user_id, [])
        try:
            return [CalendarEvent.model_validate(record) for record in records]
        except ValidationError as e:
            raise StorageError(f"Snapshot holds a malformed event for user {user_id}: {e}")

    async def get_event(self, user_id: str, event_id: str) -> Optional[CalendarEvent]:
        for event in await self.list_events(user_id):
            if event.id == event_id:
                return event
        return None

    async def replace_events(self, user_id: str, events: list[CalendarEvent]) -> int:
        ensure_unique_ids(events)
        snapshot = self._load()
        snapshot["version"] = SNAPSHOT_VERSION
        snapshot["users"][user_id] = [event.to_record() for event in events]
        try:
            self._write_snapshot(snapshot)
        except OSError as e:
            raise StorageError(f"Failed to write snapshot {self._path}: {e}")
        return len(events)
