from dataclasses import replace
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from formconvert.conversion.models import (
    Conversion,
    ConversionPage,
    ConversionStatus,
    ConversionStatusView,
    FormSummary,
    SourceType,
    UserSummary,
)
from formconvert.database.connection import get_connection
from formconvert.fields.models import DetectedField

_COLUMNS = """
    c.id, c.org_id, c.created_by_id, c.source_type, c.source_path, c.mime_type,
    c.original_filename, c.status, c.detected_fields, c.confidence, c.warnings,
    c.requires_original_export, c.result_form_id, c.expires_at, c.created_at,
    c.updated_at
"""

_VIEW_COLUMNS = (
    _COLUMNS
    + """,
    f.name AS form_name, f.status AS form_status, u.name AS creator_name
"""
)

_VIEW_JOINS = """
    LEFT JOIN forms f ON f.id = c.result_form_id
    LEFT JOIN users u ON u.id = c.created_by_id
"""


class ConversionRepository:
    """Database operations for the form_conversions table.

    Status-changing updates are conditional on the expected current status
    and report whether a row was changed, so callers can detect both state
    races and conversions deleted while a run was in flight.
    """

    def create(self, conversion: Conversion) -> Conversion:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    INSERT INTO form_conversions
                    (id, org_id, created_by_id, source_type, source_path, mime_type,
                     original_filename, status, warnings, expires_at)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
                    RETURNING created_at, updated_at
                    """,
                    (
                        conversion.id,
                        conversion.org_id,
                        conversion.created_by_id,
                        conversion.source_type.value,
                        conversion.source_path,
                        conversion.mime_type,
                        conversion.original_filename,
                        conversion.status.value,
                        list(conversion.warnings),
                        conversion.expires_at,
                    ),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError(f"Insert of conversion {conversion.id} returned no row")
        return replace(conversion, created_at=row["created_at"], updated_at=row["updated_at"])

    def find_by_id(self, conversion_id: str) -> Conversion | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM form_conversions c WHERE c.id = %s",
                    (conversion_id,),
                )
                row = cur.fetchone()

        return _row_to_conversion(row) if row is not None else None

    def find_view(self, conversion_id: str) -> ConversionStatusView | None:
        """Conversion plus its result form and creator."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_VIEW_COLUMNS}
                    FROM form_conversions c
                    {_VIEW_JOINS}
                    WHERE c.id = %s
                    """,
                    (conversion_id,),
                )
                row = cur.fetchone()

        return _row_to_view(row) if row is not None else None

    def list_for_org(
        self,
        org_id: str,
        status: ConversionStatus | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ConversionPage:
        """Newest first, with the total count for the same filter."""
        where = "c.org_id = %s"
        params: list[Any] = [org_id]
        if status is not None:
            where += " AND c.status = %s"
            params.append(status.value)

        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_VIEW_COLUMNS}
                    FROM form_conversions c
                    {_VIEW_JOINS}
                    WHERE {where}
                    ORDER BY c.created_at DESC
                    LIMIT %s OFFSET %s
                    """,
                    (*params, limit, offset),
                )
                rows = cur.fetchall()
                cur.execute(
                    f"SELECT COUNT(*) AS total FROM form_conversions c WHERE {where}",
                    params,
                )
                count_row = cur.fetchone()

        total = int(count_row["total"]) if count_row is not None else 0
        return ConversionPage(items=[_row_to_view(row) for row in rows], total=total)

    def find_next_pending_id(self) -> str | None:
        """Oldest unexpired PENDING conversion, if any."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT id
                    FROM form_conversions
                    WHERE status = 'PENDING'
                      AND expires_at > NOW()
                    ORDER BY created_at
                    LIMIT 1
                    """
                )
                row = cur.fetchone()

        return str(row[0]) if row is not None else None

    def mark_processing(self, conversion_id: str) -> bool:
        """PENDING -> PROCESSING. False if the conversion is no longer PENDING."""
        return self._update(
            """
            UPDATE form_conversions
            SET status = 'PROCESSING', updated_at = NOW()
            WHERE id = %s AND status = 'PENDING'
            """,
            (conversion_id,),
        )

    def update_source_type(self, conversion_id: str, source_type: SourceType) -> bool:
        return self._update(
            """
            UPDATE form_conversions
            SET source_type = %s, updated_at = NOW()
            WHERE id = %s
            """,
            (source_type.value, conversion_id),
        )

    def save_review_result(
        self,
        conversion_id: str,
        *,
        detected_fields: list[DetectedField],
        confidence: float,
        warnings: list[str],
        requires_original_export: bool,
    ) -> bool:
        """PROCESSING -> REVIEW_REQUIRED with the detected schema."""
        return self._update(
            """
            UPDATE form_conversions
            SET status = 'REVIEW_REQUIRED',
                detected_fields = %s,
                confidence = %s,
                warnings = %s,
                requires_original_export = %s,
                updated_at = NOW()
            WHERE id = %s AND status = 'PROCESSING'
            """,
            (
                Jsonb([f.to_dict() for f in detected_fields]),
                confidence,
                warnings,
                requires_original_export,
                conversion_id,
            ),
        )

    def mark_failed(self, conversion_id: str, warnings: list[str]) -> bool:
        return self._update(
            """
            UPDATE form_conversions
            SET status = 'FAILED', warnings = %s, updated_at = NOW()
            WHERE id = %s AND status IN ('PENDING', 'PROCESSING')
            """,
            (warnings, conversion_id),
        )

    def mark_completed(self, conversion_id: str, result_form_id: str) -> bool:
        return self._update(
            """
            UPDATE form_conversions
            SET status = 'COMPLETED', result_form_id = %s, updated_at = NOW()
            WHERE id = %s AND status IN ('REVIEW_REQUIRED', 'COMPLETED')
            """,
            (result_form_id, conversion_id),
        )

    def delete(self, conversion_id: str) -> bool:
        return self._update(
            "DELETE FROM form_conversions WHERE id = %s",
            (conversion_id,),
        )

    @staticmethod
    def _update(query: str, params: tuple[Any, ...]) -> bool:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, params)
                changed = cur.rowcount > 0
            conn.commit()
        return changed


def _row_to_conversion(row: dict[str, Any]) -> Conversion:
    return Conversion(
        id=row["id"],
        org_id=row["org_id"],
        created_by_id=row["created_by_id"],
        source_type=SourceType(row["source_type"]),
        source_path=row["source_path"],
        mime_type=row["mime_type"],
        original_filename=row["original_filename"],
        status=ConversionStatus(row["status"]),
        detected_fields=[DetectedField.from_dict(f) for f in row["detected_fields"] or []],
        confidence=row["confidence"],
        warnings=list(row["warnings"] or []),
        requires_original_export=row["requires_original_export"],
        result_form_id=row["result_form_id"],
        expires_at=row["expires_at"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_view(row: dict[str, Any]) -> ConversionStatusView:
    conversion = _row_to_conversion(row)
    result_form = (
        FormSummary(
            id=conversion.result_form_id,
            name=row["form_name"],
            status=row["form_status"],
        )
        if conversion.result_form_id and row["form_name"] is not None
        else None
    )
    return ConversionStatusView(
        conversion=conversion,
        result_form=result_form,
        created_by=UserSummary(id=conversion.created_by_id, name=row["creator_name"]),
    )
