# src/sanity/core/resource_controller.py
"""
The generic create/read/update/delete state machine behind every record tab.

One controller instance owns one kind's record list, search and status
filter, the create/edit modal state, and the save/delete protocol. Per-kind
behaviour comes entirely from the RecordSchema it is given.

Mutations always run before the refresh they trigger, and every store error
is turned into controller state plus an event. Nothing here raises into the
views.
"""
from __future__ import annotations

import asyncio
import inspect
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Set, Union

from sanity.core.event_bus import EventBus
from sanity.core.exceptions import NotFound, StoreError, ValidationError
from sanity.core.record_store import RecordStoreClient
from sanity.core.schemas import PromiseStatus, Record, RecordSchema

Confirmer = Callable[[str], Union[bool, Awaitable[bool]]]

SHIPPED_STATUS = PromiseStatus.SHIPPED.value
SHIPPED_EFFECT_DELAY = 0.1  # seconds after the modal closes
ALL_STATUSES = "All"


class ResourceController:

    def __init__(self, schema: RecordSchema, store: RecordStoreClient, owner: str, event_bus: EventBus,
                 confirmer: Optional[Confirmer] = None, shipped_delay: float = SHIPPED_EFFECT_DELAY):
        self.schema = schema
        self.store = store
        self.owner = owner
        self.event_bus = event_bus
        self.confirmer = confirmer
        self.shipped_delay = shipped_delay

        self.records: List[Record] = []
        self.search_query: str = ""
        self.status_filter: Optional[str] = None
        self.modal_open: bool = False
        self.editing_record: Optional[Record] = None
        self.draft: Dict[str, str] = schema.default_draft()
        self.field_errors: Set[str] = set()
        self.error: Optional[str] = None       # last failed save/delete, shown to the user
        self.load_error: Optional[str] = None  # last failed refresh, list is stale
        self.saving: bool = False
        self._refreshes_in_flight = 0

    @property
    def key(self) -> str:
        return self.schema.key

    @property
    def loading(self) -> bool:
        return self._refreshes_in_flight > 0

    @property
    def is_editing(self) -> bool:
        return self.editing_record is not None

    # --- Queries ---
    def visible_records(self) -> Iterator[Record]:
        """Records passing the status filter and the search query, in display order."""
        records = self.records
        status = self.status_filter
        query = self.search_query
        return (
            record for record in records
            if self.schema.matches_status(record, status) and self.schema.matches_search(record, query)
        )

    def counts_by_status(self) -> Dict[str, int]:
        counts = {ALL_STATUSES: len(self.records)}
        for choice in self.schema.status_choices:
            counts[choice] = sum(1 for r in self.records if r.get(self.schema.status_field) == choice)
        return counts

    # --- Loading ---
    async def mount(self):
        self.log("info", f"Loading {self.schema.plural.lower()}...")
        await self.refresh()

    async def refresh(self) -> bool:
        """
        Refetches the owner's records. On failure the previous list stays on
        screen and load_error is set; the later of two overlapping refreshes wins.
        """
        self._refreshes_in_flight += 1
        self._changed()
        try:
            records = await self.store.list(self.owner)
        except StoreError as e:
            self.load_error = f"Could not load {self.schema.plural.lower()}: {e}"
            self.log("error", self.load_error)
            self.event_bus.emit("resource_error", self.key, self.load_error)
            return False
        else:
            self.records = list(records)
            self.load_error = None
            return True
        finally:
            self._refreshes_in_flight -= 1
            self._changed()

    # --- Modal ---
    def open_create(self):
        self.editing_record = None
        self.draft = self.schema.default_draft()
        self.field_errors = set()
        self.error = None
        self.modal_open = True
        self._changed()

    def open_edit(self, record: Record):
        self.editing_record = record
        self.draft = self.schema.draft_from_record(record)
        self.field_errors = set()
        self.error = None
        self.modal_open = True
        self._changed()

    def close_modal(self):
        self.modal_open = False
        self.editing_record = None
        self.field_errors = set()
        self._changed()

    def set_field(self, name: str, value: Any):
        if isinstance(value, Enum):
            value = value.value
        value = "" if value is None else str(value)
        self.schema.check_value(name, value)
        self.draft[name] = value
        if value.strip():
            self.field_errors.discard(name)
        self._changed()

    # --- Filters ---
    def set_search_query(self, text: str):
        self.search_query = text or ""
        self._changed()

    def set_status_filter(self, status: Optional[Union[str, PromiseStatus]]):
        if isinstance(status, Enum):
            status = status.value
        if status in (None, "", ALL_STATUSES):
            self.status_filter = None
        elif not self.schema.has_status:
            raise ValueError(f"{self.schema.plural} have no status to filter on")
        else:
            self.schema.check_value(self.schema.status_field, status)
            self.status_filter = status
        self._changed()

    def clear_error(self):
        self.error = None
        self.load_error = None
        self._changed()

    # --- Mutations ---
    async def save(self) -> bool:
        """
        Creates or overwrites the record from the draft.

        Returns:
            True when the record was stored and the modal closed. On False the
            modal stays open with field_errors or error describing what went wrong.
        """
        missing = self.schema.missing_required(self.draft)
        if missing:
            self.field_errors = set(missing)
            labels = [self.schema.field(name).label for name in missing]
            self.error = f"Please fill in: {', '.join(labels)}"
            self.log("warning", str(ValidationError(missing)))
            self._changed()
            return False

        invalid = self.schema.invalid_choices(self.draft)
        if invalid:
            self.field_errors = set(invalid)
            labels = [self.schema.field(name).label for name in invalid]
            self.error = f"Please choose a valid value for: {', '.join(labels)}"
            self.log("warning", self.error)
            self._changed()
            return False

        editing = self.editing_record
        payload = self.schema.to_payload(self.draft, self.owner)
        shipped = self._is_shipped_transition(editing)
        noun = self.schema.singular.lower()

        self.saving = True
        self.error = None
        self._changed()
        try:
            if editing is not None:
                saved = await self.store.update(editing.id, payload, self.owner)
                self.log("info", f"Updated {noun} {editing.id}")
            else:
                saved = await self.store.create(payload)
                self.log("success", f"Created {noun} {saved.id}")
        except NotFound:
            self.close_modal()
            self._report_error(f"This {noun} no longer exists.")
            await self.refresh()
            return False
        except StoreError as e:
            action = "update" if editing is not None else "create"
            self._report_error(f"Could not {action} {noun}: {e}")
            return False
        finally:
            self.saving = False
            self._changed()

        await self.refresh()
        self.close_modal()
        if shipped:
            self._schedule_shipped_effect(saved)
        return True

    async def delete(self, record_id: str) -> bool:
        """
        Deletes a record after the user confirms. Declining (or having no way
        to ask) makes no store call. Deleting a record that is already gone
        counts as success.
        """
        noun = self.schema.singular.lower()
        if not await self._confirm(f"Are you sure you want to delete this {noun}?"):
            self.log("info", f"Delete of {noun} {record_id} cancelled.")
            return False

        self.error = None
        self._changed()
        try:
            await self.store.delete(record_id, self.owner)
            self.log("info", f"Deleted {noun} {record_id}")
        except NotFound:
            self.log("info", f"{self.schema.singular} {record_id} was already deleted.")
        except StoreError as e:
            self._report_error(f"Could not delete {noun}: {e}")
            return False

        await self.refresh()
        return True

    # --- Internals ---
    def _is_shipped_transition(self, editing: Optional[Record]) -> bool:
        if editing is None or not self.schema.has_status:
            return False
        status_field = self.schema.status_field
        return editing.get(status_field) != SHIPPED_STATUS and self.draft.get(status_field) == SHIPPED_STATUS

    def _schedule_shipped_effect(self, record: Record):
        loop = asyncio.get_running_loop()
        loop.call_later(self.shipped_delay, self.event_bus.emit, "promise_shipped", record)

    async def _confirm(self, prompt: str) -> bool:
        if self.confirmer is None:
            return False
        answer = self.confirmer(prompt)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)

    def _report_error(self, message: str):
        self.error = message
        self.log("error", message)
        self.event_bus.emit("resource_error", self.key, message)
        self._changed()

    def _changed(self):
        self.event_bus.emit("resource_state_changed", self.key)

    def log(self, level: str, message: str):
        self.event_bus.emit("log_message_received", f"{self.schema.plural}Controller", level, message)
