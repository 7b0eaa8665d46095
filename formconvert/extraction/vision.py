"""Vision-model extraction for photos and image-only PDFs."""

from typing import Any

from formconvert.ai.client_base import BaseAiClient
from formconvert.ai.exceptions import AiClientError
from formconvert.ai.json_response import ParseOutcome, parse_json_object
from formconvert.ai.models import ImageInput
from formconvert.ai.prompt_loader import load_prompt
from formconvert.extraction.exceptions import VisionExtractionError
from formconvert.extraction.models import (
    BoundingBox,
    DetectedFormElement,
    DocumentSection,
    DocumentStructure,
    DocumentTable,
    OcrResult,
)
from formconvert.extraction.text_structure import map_element_type
from formconvert.logging.logger import Log

FALLBACK_CONFIDENCE = 0.5
DEFAULT_CONFIDENCE = 0.8

_VISION_MEDIA_TYPES = {
    "image/jpeg": "image/jpeg",
    "image/png": "image/png",
    "image/gif": "image/gif",
    "image/webp": "image/webp",
    "image/heic": "image/jpeg",
    "image/heif": "image/jpeg",
}


def vision_media_type(mime_type: str) -> str:
    return _VISION_MEDIA_TYPES.get(mime_type, "image/jpeg")


class VisionExtractor:
    """Sends page images to a multimodal model and decodes its JSON description."""

    def __init__(
        self,
        *,
        client: BaseAiClient,
        model: str,
        temperature: float = 0.0,
        prompt_template: str | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = temperature
        self._prompt_template = (
            prompt_template if prompt_template is not None else load_prompt("vision_prompt.txt")
        )

    def extract(self, images: list[ImageInput], page_count: int) -> OcrResult:
        """Extract text and structure from page images.

        Raises:
            VisionExtractionError: if the provider call fails. An unreadable
                answer is not an error and degrades to the raw response text.
        """
        prompt = self._prompt_template.replace("{page_count}", str(page_count))
        try:
            raw_response = self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt="",
                user_prompt=prompt,
                images=images,
            )
        except AiClientError as exc:
            raise VisionExtractionError(f"Vision extraction failed: {exc}") from exc
        Log.debug(f"Vision raw response:\n{raw_response}")

        outcome = parse_json_object(raw_response)
        if outcome.payload is None:
            return self.fallback_result(raw_response, page_count, outcome)
        return build_ocr_result(outcome.payload, page_count)

    @staticmethod
    def fallback_result(raw_response: str, page_count: int, outcome: ParseOutcome) -> OcrResult:
        """Keep the model's raw text when its answer is not the requested JSON."""
        Log.warning(f"Vision response was not valid JSON, using raw text: {outcome.error}")
        return OcrResult(
            text=raw_response,
            page_count=page_count,
            is_scanned=True,
            confidence=FALLBACK_CONFIDENCE,
            structure=DocumentStructure(),
        )


def build_ocr_result(payload: dict[str, Any], page_count: int) -> OcrResult:
    """Build an OcrResult from a decoded vision payload, tolerating missing parts."""
    title = payload.get("title")
    structure = DocumentStructure(
        title=title if isinstance(title, str) and title.strip() else None,
        sections=[s for s in map(_build_section, _as_list(payload.get("sections"))) if s],
        tables=[t for t in map(_build_table, _as_list(payload.get("tables"))) if t],
        fields=[f for f in map(_build_element, _as_list(payload.get("fields"))) if f],
    )
    text = payload.get("text")
    return OcrResult(
        text=text if isinstance(text, str) else "",
        page_count=page_count,
        is_scanned=True,
        confidence=clamp_confidence(payload.get("confidence"), DEFAULT_CONFIDENCE),
        structure=structure,
    )


def clamp_confidence(value: object, default: float) -> float:
    """Coerce a model-supplied confidence into [0, 1]; missing or zero means default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return default
    return max(0.0, min(1.0, float(value)))


def _as_list(value: object) -> list[Any]:
    return value if isinstance(value, list) else []


def _build_section(raw: Any) -> DocumentSection | None:
    if not isinstance(raw, dict):
        return None
    heading = raw.get("heading")
    level = raw.get("level")
    content = raw.get("content")
    return DocumentSection(
        heading=heading if isinstance(heading, str) else None,
        content=content if isinstance(content, str) else "",
        level=level if isinstance(level, int) and level > 0 else 1,
    )


def _build_table(raw: Any) -> DocumentTable | None:
    if not isinstance(raw, dict):
        return None
    headers = [str(h) for h in _as_list(raw.get("headers"))]
    rows = [[str(cell) for cell in row] for row in _as_list(raw.get("rows")) if isinstance(row, list)]
    return DocumentTable(headers=headers, rows=rows)


def _build_element(raw: Any) -> DetectedFormElement | None:
    if not isinstance(raw, dict):
        return None
    label = raw.get("label")
    if not isinstance(label, str) or not label.strip():
        return None
    value = raw.get("value")
    is_required = raw.get("isRequired")
    return DetectedFormElement(
        type=map_element_type(raw.get("type")),
        label=label.strip(),
        value=str(value) if value is not None else None,
        is_required=is_required if isinstance(is_required, bool) else None,
        bounding_box=BoundingBox.from_dict(raw.get("boundingBox")),
        confidence=clamp_confidence(raw.get("confidence"), DEFAULT_CONFIDENCE),
    )
