"""Shared fixtures: an in-memory record store and an event recorder."""

import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping

import pytest

from sanity.core.event_bus import EventBus
from sanity.core.exceptions import NotFound, StoreError
from sanity.core.schemas import ID_COLUMN, OWNER_COLUMN, Record, RecordSchema

OWNER = "user-1"


class InMemoryRecordStore:
    """Stands in for RecordStoreClient: same coroutine interface, rows kept in a dict."""

    _BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __init__(self, schema: RecordSchema):
        self.schema = schema
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.calls: List[tuple] = []
        self.fail_next: Dict[str, StoreError] = {}
        self._clock = itertools.count()

    def fail(self, operation: str, error: StoreError = None):
        """Makes the next call to `operation` raise."""
        self.fail_next[operation] = error or StoreError("backend unavailable", self.schema.collection, 503)

    def _maybe_fail(self, operation: str):
        error = self.fail_next.pop(operation, None)
        if error is not None:
            raise error

    def seed(self, owner: str = OWNER, **fields) -> Record:
        row = dict(self.schema.default_draft())
        row.update(fields)
        return self._insert(row, owner)

    def _insert(self, fields: Mapping[str, Any], owner: str) -> Record:
        record_id = str(uuid.uuid4())
        created = (self._BASE_TIME + timedelta(seconds=next(self._clock))).isoformat()
        row = {k: v for k, v in fields.items() if k != OWNER_COLUMN}
        row.update({ID_COLUMN: record_id, OWNER_COLUMN: owner, self.schema.created_column: created})
        self.rows[record_id] = row
        return Record.from_row(self.schema, row)

    async def list(self, owner: str) -> List[Record]:
        self.calls.append(("list", owner))
        self._maybe_fail("list")
        rows = [row for row in self.rows.values() if row[OWNER_COLUMN] == owner]
        rows.sort(key=lambda row: row[self.schema.created_column], reverse=True)
        return [Record.from_row(self.schema, row) for row in rows]

    async def create(self, fields: Mapping[str, Any]) -> Record:
        self.calls.append(("create", dict(fields)))
        self._maybe_fail("create")
        return self._insert(fields, fields[OWNER_COLUMN])

    async def update(self, record_id: str, fields: Mapping[str, Any], owner: str) -> Record:
        self.calls.append(("update", record_id, dict(fields)))
        self._maybe_fail("update")
        row = self.rows.get(record_id)
        if row is None or row[OWNER_COLUMN] != owner:
            raise NotFound(record_id, self.schema.collection)
        row.update({k: v for k, v in fields.items() if k not in (ID_COLUMN, OWNER_COLUMN)})
        return Record.from_row(self.schema, row)

    async def delete(self, record_id: str, owner: str):
        self.calls.append(("delete", record_id))
        self._maybe_fail("delete")
        row = self.rows.get(record_id)
        if row is None or row[OWNER_COLUMN] != owner:
            raise NotFound(record_id, self.schema.collection)
        del self.rows[record_id]

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)


class EventRecorder:
    """Subscribes to a set of event names and keeps every emission in order."""

    def __init__(self, event_bus: EventBus, *event_names: str):
        self.events: List[tuple] = []
        for name in event_names:
            event_bus.subscribe(name, lambda *args, _name=name: self.events.append((_name, args)))

    def of(self, name: str) -> List[tuple]:
        return [args for event_name, args in self.events if event_name == name]


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def recorder(event_bus):
    return EventRecorder(
        event_bus,
        "promise_shipped",
        "resource_error",
        "resource_state_changed",
        "log_message_received",
        "confetti_burst_requested",
    )
