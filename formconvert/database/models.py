from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class FormFieldRecord:
    """Represents a row from the form_fields table."""

    name: str
    type: str
    slug: str = ""


@dataclass(frozen=True)
class FormRecord:
    """Represents a row from the forms table, optionally with its fields."""

    id: str
    org_id: str
    name: str
    status: str
    field_fingerprint: str | None = None
    fields: list[FormFieldRecord] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass(frozen=True)
class NewFormField:
    slug: str
    name: str
    type: str
    purpose: str
    is_required: bool
    is_sensitive: bool
    order: int
    purpose_note: str | None = None
    help_text: str | None = None
    options: list[str] | None = None
    section: str | None = None


@dataclass(frozen=True)
class NewForm:
    """Insert payload for a form created from a conversion."""

    org_id: str
    created_by_id: str
    name: str
    type: str
    field_fingerprint: str
    fields: list[NewFormField]
    description: str | None = None
    status: str = "DRAFT"

