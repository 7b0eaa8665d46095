import pytest

from formconvert.database.connection import get_connection
from formconvert.database.repositories.feature_flag_repository import (
    PHOTO_TO_FORM,
    FeatureFlagRepository,
)


@pytest.mark.integration
class TestIsEnabled:
    def test_enabled(self, enable_conversion: str) -> None:
        assert FeatureFlagRepository().is_enabled(enable_conversion, PHOTO_TO_FORM) is True

    def test_missing_row_is_disabled(self, org_id: str) -> None:
        assert FeatureFlagRepository().is_enabled(org_id, PHOTO_TO_FORM) is False

    def test_disabled_row(self, enable_conversion: str) -> None:
        with get_connection() as conn:
            conn.execute(
                "UPDATE feature_flags SET enabled = FALSE WHERE org_id = %s",
                (enable_conversion,),
            )
            conn.commit()

        assert FeatureFlagRepository().is_enabled(enable_conversion, PHOTO_TO_FORM) is False
