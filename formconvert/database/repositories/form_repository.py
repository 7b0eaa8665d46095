import uuid
from typing import Any

import psycopg
from psycopg.errors import UniqueViolation
from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from formconvert.conversion.exceptions import DuplicateFormError
from formconvert.database.connection import get_connection
from formconvert.database.models import FormFieldRecord, FormRecord, NewForm


class FormRepository:
    """Database operations for the forms and form_fields tables."""

    def find_by_fingerprint(self, org_id: str, fingerprint: str) -> FormRecord | None:
        """Find a non-archived form in the org with exactly this fingerprint."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, org_id, name, status, field_fingerprint, created_at
                    FROM forms
                    WHERE org_id = %s
                      AND field_fingerprint = %s
                      AND status <> 'ARCHIVED'
                    ORDER BY created_at
                    LIMIT 1
                    """,
                    (org_id, fingerprint),
                )
                row = cur.fetchone()

        return _row_to_form(row) if row is not None else None

    def find_by_id(self, form_id: str) -> FormRecord | None:
        """Find a form with its fields."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, org_id, name, status, field_fingerprint, created_at
                    FROM forms
                    WHERE id = %s
                    """,
                    (form_id,),
                )
                row = cur.fetchone()
                if row is None:
                    return None
                fields = _fetch_fields(cur, [form_id])

        return _row_to_form(row, fields.get(form_id, []))

    def list_with_fields(self, org_id: str) -> list[FormRecord]:
        """All non-archived forms in the org, each with its field names and types."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, org_id, name, status, field_fingerprint, created_at
                    FROM forms
                    WHERE org_id = %s
                      AND status <> 'ARCHIVED'
                    ORDER BY created_at
                    """,
                    (org_id,),
                )
                rows = cur.fetchall()
                fields = _fetch_fields(cur, [row["id"] for row in rows])

        return [_row_to_form(row, fields.get(row["id"], [])) for row in rows]

    def create(self, form: NewForm) -> str:
        """Insert a form and its fields in one transaction and return the new id.

        Raises:
            DuplicateFormError: if an active form in the org already has this
                fingerprint (unique index forms_org_fingerprint_active).
        """
        form_id = str(uuid.uuid4())
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO forms
                        (id, org_id, created_by_id, name, description, type, status,
                         field_fingerprint)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                        """,
                        (
                            form_id,
                            form.org_id,
                            form.created_by_id,
                            form.name,
                            form.description,
                            form.type,
                            form.status,
                            form.field_fingerprint,
                        ),
                    )
                    cur.executemany(
                        """
                        INSERT INTO form_fields
                        (form_id, slug, name, type, purpose, purpose_note, help_text,
                         is_required, is_sensitive, options, section, "order")
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                        """,
                        [
                            (
                                form_id,
                                f.slug,
                                f.name,
                                f.type,
                                f.purpose,
                                f.purpose_note,
                                f.help_text,
                                f.is_required,
                                f.is_sensitive,
                                Jsonb(f.options) if f.options is not None else None,
                                f.section,
                                f.order,
                            )
                            for f in form.fields
                        ],
                    )
                conn.commit()
        except UniqueViolation as exc:
            existing = self.find_by_fingerprint(form.org_id, form.field_fingerprint)
            raise DuplicateFormError(
                form.field_fingerprint, existing.id if existing else None
            ) from exc
        return form_id

    def update_fingerprint(self, form_id: str, fingerprint: str) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE forms
                SET field_fingerprint = %s, updated_at = NOW()
                WHERE id = %s
                """,
                (fingerprint, form_id),
            )
            conn.commit()


def _fetch_fields(
    cur: psycopg.Cursor[dict[str, Any]], form_ids: list[str]
) -> dict[str, list[FormFieldRecord]]:
    if not form_ids:
        return {}
    cur.execute(
        """
        SELECT form_id, name, type, slug
        FROM form_fields
        WHERE form_id = ANY(%s)
        ORDER BY form_id, "order"
        """,
        (form_ids,),
    )
    grouped: dict[str, list[FormFieldRecord]] = {}
    for row in cur.fetchall():
        grouped.setdefault(row["form_id"], []).append(
            FormFieldRecord(name=row["name"], type=row["type"], slug=row["slug"])
        )
    return grouped


def _row_to_form(
    row: dict[str, Any], fields: list[FormFieldRecord] | None = None
) -> FormRecord:
    return FormRecord(
        id=row["id"],
        org_id=row["org_id"],
        name=row["name"],
        status=row["status"],
        field_fingerprint=row["field_fingerprint"],
        created_at=row["created_at"],
        fields=fields or [],
    )
