from typing import ClassVar

from formconvert.ai.client_base import BaseAiClient
from formconvert.ai.example_client_adapter import ExampleClientAdapter
from formconvert.ai.openai_client_adapter import OpenAIClientAdapter
from formconvert.config.settings import Settings


class AiClientFactory:
    """Creates the configured AI client and resolves its model name."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseAiClient:
        """Create a configured AI client from application settings."""
        provider = settings.ai_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=cls._resolve_api_key(provider, settings),
            timeout_seconds=settings.ai_timeout_seconds,
            max_retries=settings.ai_max_retries,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def model_name(cls, settings: Settings) -> str:
        provider = settings.ai_provider.lower()
        key_map = {
            "example": "example",
            "openai": settings.ai_openai_model_name,
            "openai_compatible": settings.ai_openai_compatible_model_name,
            "openrouter": settings.ai_openrouter_model_name,
            "groq": settings.ai_groq_model_name,
            "together": settings.ai_together_model_name,
            "ollama": settings.ai_ollama_model_name,
        }
        return key_map.get(provider, "") or ""

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.ai_openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "ai_openai_compatible_base_url is required for "
                    "ai_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown AI provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _resolve_api_key(cls, provider: str, settings: Settings) -> str:
        key_map = {
            "openai": settings.ai_openai_api_key,
            "openai_compatible": settings.ai_openai_compatible_api_key,
            "openrouter": settings.ai_openrouter_api_key,
            "groq": settings.ai_groq_api_key,
            "together": settings.ai_together_api_key,
            "ollama": settings.ai_ollama_api_key,
        }
        return key_map.get(provider, "") or ""
