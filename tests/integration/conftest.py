import os
import uuid
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import psycopg
import pytest
from psycopg.conninfo import make_conninfo

from formconvert.config.settings import Settings
from formconvert.conversion.models import Conversion, ConversionStatus, SourceType
from formconvert.database.connection import close_pool, get_connection, init_pool
from formconvert.database.repositories.conversion_repository import ConversionRepository

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "formconvert" / "database" / "schema.sql"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "formconvert_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    conninfo = make_conninfo(
        host=test_settings.db_host,
        port=test_settings.db_port,
        dbname=test_settings.db_database,
        user=test_settings.db_username,
        password=test_settings.db_password,
    )
    try:
        with psycopg.connect(conninfo, connect_timeout=3) as conn:
            conn.execute(SCHEMA_PATH.read_text())
            conn.commit()
    except psycopg.Error as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env")

    init_pool(test_settings, max_size=4)
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def org_id(integration_pool: None) -> Generator[str, None, None]:
    """A fresh organization id; every row created under it is removed afterwards."""
    org = f"org-{uuid.uuid4()}"
    yield org
    with get_connection() as conn:
        with conn.cursor() as cur:
            cur.execute("DELETE FROM form_conversions WHERE org_id = %s", (org,))
            cur.execute("DELETE FROM forms WHERE org_id = %s", (org,))
            cur.execute("DELETE FROM feature_flags WHERE org_id = %s", (org,))
        conn.commit()


@pytest.fixture
def seed_user(integration_pool: None) -> Generator[str, None, None]:
    user_id = f"user-{uuid.uuid4()}"
    with get_connection() as conn:
        conn.execute("INSERT INTO users (id, name) VALUES (%s, %s)", (user_id, "Case Manager"))
        conn.commit()
    yield user_id
    with get_connection() as conn:
        conn.execute("DELETE FROM users WHERE id = %s", (user_id,))
        conn.commit()


@pytest.fixture
def enable_conversion(org_id: str) -> str:
    with get_connection() as conn:
        conn.execute(
            """
            INSERT INTO feature_flags (org_id, flag_key, enabled)
            VALUES (%s, 'photo-to-form', TRUE)
            """,
            (org_id,),
        )
        conn.commit()
    return org_id


@pytest.fixture
def make_conversion(org_id: str) -> Callable[..., Conversion]:
    """Insert a PENDING conversion through the repository."""
    repo = ConversionRepository()

    def _make(
        created_by_id: str = "user-1",
        source_type: SourceType = SourceType.PHOTO,
        expires_in: timedelta = timedelta(days=7),
    ) -> Conversion:
        return repo.create(
            Conversion(
                id=str(uuid.uuid4()),
                org_id=org_id,
                created_by_id=created_by_id,
                source_type=source_type,
                source_path=f"conversions/{org_id}/intake.jpg",
                mime_type="image/jpeg",
                original_filename="intake.jpg",
                status=ConversionStatus.PENDING,
                warnings=["File extension .png does not match MIME type image/jpeg"],
                expires_at=datetime.now(timezone.utc) + expires_in,
            )
        )

    return _make
