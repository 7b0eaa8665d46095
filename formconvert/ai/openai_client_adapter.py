from typing import Any

import httpx
import openai

from formconvert.ai.client_base import BaseAiClient
from formconvert.ai.exceptions import AiClientError, AiNetworkError
from formconvert.ai.models import ImageInput


class OpenAIClientAdapter(BaseAiClient):
    """AI client adapter built on the OpenAI-compatible chat API.

    The SDK enforces the timeout per attempt and retries connection errors,
    429s and 5xx responses up to max_retries times before raising.
    """

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        max_retries: int = 2,
        base_url: str | None = None,
        max_tokens: int = 4096,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._max_tokens = max_tokens

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        images: list[ImageInput] | None = None,
    ) -> str:
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": self._user_content(user_prompt, images)})

        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=self._max_tokens,
                response_format={"type": "json_object"},
                messages=messages,  # type: ignore[arg-type]
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise AiNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise AiNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise AiClientError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise AiClientError("AI returned empty response")
        return content

    @staticmethod
    def _user_content(
        user_prompt: str, images: list[ImageInput] | None
    ) -> str | list[dict[str, Any]]:
        if not images:
            return user_prompt
        parts: list[dict[str, Any]] = [
            {"type": "image_url", "image_url": {"url": image.to_data_url()}}
            for image in images
        ]
        parts.append({"type": "text", "text": user_prompt})
        return parts
