from abc import ABC, abstractmethod

from formconvert.ai.models import ImageInput


class BaseAiClient(ABC):
    """Contract for provider-specific chat clients used by extraction and field detection."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        images: list[ImageInput] | None = None,
    ) -> str:
        """Return the provider response as plain text.

        Images, when given, are sent before the user prompt in the same turn.

        Raises:
            AiNetworkError: on transport or provider failures.
            AiClientError: when the provider returns no content.
        """
