"""Network-free AI client adapter.

Returns canned JSON for both kinds of request the pipeline makes, so the
worker can run end to end in local development without provider keys.
"""

import json
from typing import ClassVar

from formconvert.ai.client_base import BaseAiClient
from formconvert.ai.models import ImageInput


class ExampleClientAdapter(BaseAiClient):
    """Example adapter that answers with fixed vision and field-detection payloads."""

    VISION_RESPONSE: ClassVar[dict[str, object]] = {
        "text": "CLIENT INTAKE\nName: ____\nDate of Birth: ____",
        "title": "Client Intake",
        "sections": [{"heading": "CLIENT INTAKE", "content": "", "level": 1}],
        "tables": [],
        "fields": [
            {"type": "text_field", "label": "Name", "isRequired": True, "confidence": 0.9},
            {"type": "date", "label": "Date of Birth", "confidence": 0.9},
        ],
        "confidence": 0.85,
    }

    FIELDS_RESPONSE: ClassVar[dict[str, object]] = {
        "suggestedFormName": "Client Intake",
        "suggestedFormType": "INTAKE",
        "fields": [],
    }

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        images: list[ImageInput] | None = None,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt
        if images:
            return json.dumps(self.VISION_RESPONSE)
        return json.dumps(self.FIELDS_RESPONSE)
