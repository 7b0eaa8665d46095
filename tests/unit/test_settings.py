import pytest
from pydantic import ValidationError

from formconvert.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_poll_interval(self) -> None:
        s = Settings()
        assert s.poll_interval_seconds == 5

    def test_default_conversion_ttl(self) -> None:
        s = Settings()
        assert s.conversion_ttl_days == 7

    def test_default_pdf_engine(self) -> None:
        s = Settings()
        assert s.pdf_engine == "pdfplumber"

    def test_default_upload_ceilings(self) -> None:
        s = Settings()
        assert s.max_photo_bytes == 10 * 1024 * 1024
        assert s.max_pdf_bytes == 25 * 1024 * 1024

    def test_default_similarity_thresholds(self) -> None:
        s = Settings()
        assert (s.similarity_exact, s.similarity_high, s.similarity_medium, s.similarity_low) == (
            0.95,
            0.8,
            0.6,
            0.4,
        )

    def test_default_ai_settings(self) -> None:
        s = Settings()
        assert s.ai_provider == "openai"
        assert s.ai_timeout_seconds == 60
        assert s.ai_max_retries == 2
        assert s.vision_max_pages == 5


class TestSettingsFromEnv:
    def test_loads_app_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("APP_ENV", "production")
        s = Settings()
        assert s.app_env == "production"

    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_ai_provider(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AI_PROVIDER", "example")
        s = Settings()
        assert s.ai_provider == "example"

    def test_loads_similarity_threshold(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIMILARITY_HIGH", "0.85")
        s = Settings()
        assert s.similarity_high == 0.85


class TestSettingsValidation:
    def test_invalid_db_port_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()

    def test_invalid_ttl_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONVERSION_TTL_DAYS", "a week")
        with pytest.raises(ValidationError):
            Settings()
