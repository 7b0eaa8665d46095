from formconvert.database.connection import get_connection

PHOTO_TO_FORM = "photo-to-form"


class FeatureFlagRepository:
    """Read-only access to per-organization feature flags."""

    def is_enabled(self, org_id: str, flag_key: str) -> bool:
        """A flag with no row for the org counts as disabled."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "SELECT enabled FROM feature_flags WHERE org_id = %s AND flag_key = %s",
                    (org_id, flag_key),
                )
                row = cur.fetchone()

        return bool(row and row[0])
