from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "formconvert"
    db_username: str = "formconvert"
    db_password: str = "secret"

    poll_interval_seconds: int = 5
    conversion_ttl_days: int = 7

    pdf_engine: str = "pdfplumber"

    blob_store: str = "local"
    blob_root: str = "/app/files"

    max_photo_bytes: int = 10 * 1024 * 1024
    max_pdf_bytes: int = 25 * 1024 * 1024

    similarity_exact: float = 0.95
    similarity_high: float = 0.8
    similarity_medium: float = 0.6
    similarity_low: float = 0.4
    similar_forms_limit: int = 5

    ai_provider: str = "openai"
    ai_openai_api_key: str = ""
    ai_openai_model_name: str = "gpt-4o"
    ai_openai_compatible_base_url: str = ""
    ai_openai_compatible_api_key: str = ""
    ai_openai_compatible_model_name: str = ""
    ai_openrouter_api_key: str = ""
    ai_openrouter_model_name: str = ""
    ai_groq_api_key: str = ""
    ai_groq_model_name: str = ""
    ai_together_api_key: str = ""
    ai_together_model_name: str = ""
    ai_ollama_api_key: str = "ollama"
    ai_ollama_model_name: str = ""
    ai_temperature: float = 0.0
    ai_timeout_seconds: int = 60
    ai_max_retries: int = 2
    vision_max_pages: int = 5
