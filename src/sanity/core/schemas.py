"""Record kinds and the schema descriptors that drive the generic controller.

One ``RecordSchema`` per kind describes everything the controller and the
views need to know about it: which collection it lives in, its form fields,
which fields are required, which are searched, and whether it has a status
axis. Adding a kind means adding a descriptor, not a controller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

OWNER_COLUMN = "user_id"
ID_COLUMN = "id"


class PromiseStatus(str, Enum):
    PENDING = "Pending"
    SHIPPED = "Shipped"
    CANCELED = "Canceled"


class FieldKind(Enum):
    TEXT = "text"
    LONG_TEXT = "long_text"
    CHOICE = "choice"
    DATE = "date"


@dataclass(frozen=True)
class FieldSpec:
    """A single form field of a record kind."""
    name: str
    label: str
    required: bool = False
    kind: FieldKind = FieldKind.TEXT
    default: str = ""
    choices: Tuple[str, ...] = ()
    placeholder: str = ""


@dataclass(frozen=True)
class Record:
    """One persisted item. Identity fields are kept apart from the editable ones."""
    id: str
    owner: str
    created_at: Optional[str]
    fields: Mapping[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    @classmethod
    def from_row(cls, schema: "RecordSchema", row: Mapping[str, Any]) -> "Record":
        return cls(
            id=str(row[ID_COLUMN]),
            owner=str(row.get(OWNER_COLUMN, "")),
            created_at=row.get(schema.created_column),
            fields={spec.name: row.get(spec.name) for spec in schema.fields},
        )


@dataclass(frozen=True)
class RecordSchema:
    key: str
    collection: str
    singular: str
    plural: str
    fields: Tuple[FieldSpec, ...]
    search_fields: Tuple[str, ...]
    status_field: Optional[str] = None
    created_column: str = "created_at"

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields if spec.required)

    @property
    def date_fields(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields if spec.kind is FieldKind.DATE)

    @property
    def has_status(self) -> bool:
        return self.status_field is not None

    @property
    def status_choices(self) -> Tuple[str, ...]:
        if not self.status_field:
            return ()
        return self.field(self.status_field).choices

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(f"{self.key} has no field '{name}'")

    def default_draft(self) -> Dict[str, str]:
        return {spec.name: spec.default for spec in self.fields}

    def draft_from_record(self, record: Record) -> Dict[str, str]:
        """Copies a record into a draft. Absent optional values become empty strings; absent choices get their default."""
        draft = self.default_draft()
        for spec in self.fields:
            value = record.get(spec.name)
            if spec.kind is FieldKind.CHOICE and value in (None, ""):
                value = spec.default
            draft[spec.name] = "" if value is None else str(value)
        return draft

    def check_value(self, name: str, value: Any):
        """Raises ValueError when a choice field is given a value outside its enumeration."""
        spec = self.field(name)
        if spec.kind is FieldKind.CHOICE and value not in spec.choices:
            raise ValueError(f"{value!r} is not a valid {spec.label.lower()}; expected one of {spec.choices}")

    def invalid_choices(self, draft: Mapping[str, Any]) -> Tuple[str, ...]:
        """Choice fields whose draft value is outside their enumeration."""
        return tuple(
            spec.name for spec in self.fields
            if spec.kind is FieldKind.CHOICE and draft.get(spec.name) not in spec.choices
        )

    def missing_required(self, draft: Mapping[str, Any]) -> Tuple[str, ...]:
        return tuple(
            name for name in self.required_fields
            if not str(draft.get(name) or "").strip()
        )

    def to_payload(self, draft: Mapping[str, Any], owner: str) -> Dict[str, Any]:
        """Builds the full field set sent to the store: draft values plus owner, empty dates as None."""
        payload: Dict[str, Any] = {}
        for spec in self.fields:
            value = draft.get(spec.name, spec.default)
            if spec.kind is FieldKind.DATE and not value:
                value = None
            payload[spec.name] = value
        payload[OWNER_COLUMN] = owner
        return payload

    def matches_search(self, record: Record, query: str) -> bool:
        if not query:
            return True
        needle = query.lower()
        for name in self.search_fields:
            value = record.get(name)
            if value and needle in str(value).lower():
                return True
        return False

    def matches_status(self, record: Record, status: Optional[str]) -> bool:
        if status is None or not self.status_field:
            return True
        return record.get(self.status_field) == status


PROMISES = RecordSchema(
    key="promises",
    collection="feature_promises",
    singular="Promise",
    plural="Promises",
    fields=(
        FieldSpec("title", "Title", required=True, placeholder="e.g., Dark mode support"),
        FieldSpec("description", "Description", kind=FieldKind.LONG_TEXT, placeholder="Optional details..."),
        FieldSpec("promised_to", "Promised To", required=True, placeholder="e.g., Acme Corp, John Smith, Self"),
        FieldSpec("status", "Status", kind=FieldKind.CHOICE, default=PromiseStatus.PENDING.value,
                  choices=tuple(s.value for s in PromiseStatus)),
        FieldSpec("reminder_date", "Reminder Date (optional)", kind=FieldKind.DATE),
    ),
    search_fields=("title", "promised_to", "description"),
    status_field="status",
    created_column="date_created",
)

DECISIONS = RecordSchema(
    key="decisions",
    collection="decisions",
    singular="Decision",
    plural="Decisions",
    fields=(
        FieldSpec("title", "Title", required=True, placeholder="e.g., Hosting provider"),
        FieldSpec("options_considered", "Options Considered", kind=FieldKind.LONG_TEXT,
                  placeholder="e.g., Vercel, AWS, Heroku"),
        FieldSpec("choice_made", "Choice Made", required=True, placeholder="e.g., Vercel"),
        FieldSpec("reasoning", "Reasoning", kind=FieldKind.LONG_TEXT, placeholder="Why this option won..."),
    ),
    search_fields=("title", "choice_made", "options_considered", "reasoning"),
)

EXCEPTIONS = RecordSchema(
    key="exceptions",
    collection="exceptions",
    singular="Exception",
    plural="Exceptions",
    fields=(
        FieldSpec("type", "Type", required=True, placeholder="e.g., Discount, Extended deadline"),
        FieldSpec("who", "Who", required=True, placeholder="e.g., Acme Corp"),
        FieldSpec("reason", "Reason", kind=FieldKind.LONG_TEXT, placeholder="Why the exception was granted..."),
        FieldSpec("notes", "Notes", kind=FieldKind.LONG_TEXT, placeholder="Optional notes..."),
    ),
    search_fields=("type", "who", "reason", "notes"),
)

ALL_SCHEMAS: Tuple[RecordSchema, ...] = (PROMISES, DECISIONS, EXCEPTIONS)
