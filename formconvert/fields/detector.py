"""AI-assisted field detection.

Turns an OcrResult into a canonical DetectedField list: an AI pass proposes
fields from the document text, the proposal is merged with what OCR found,
and every merged candidate is mapped onto the form field enums.
"""

import json
from dataclasses import replace
from typing import Any

from formconvert.ai.client_base import BaseAiClient
from formconvert.ai.json_response import parse_json_object
from formconvert.ai.prompt_loader import load_prompt
from formconvert.conversion.models import FormType
from formconvert.extraction.models import OcrResult
from formconvert.fields.exceptions import FieldDetectionError
from formconvert.fields.mapping import MAX_SLUG_LENGTH, map_to_form_field
from formconvert.fields.merge import candidate_from_ocr, merge_field_detections
from formconvert.fields.models import (
    DetectedField,
    EnhancementResult,
    FieldCandidate,
    FieldDetectionResult,
)
from formconvert.fields.validator import LOW_CONFIDENCE_THRESHOLD
from formconvert.logging.logger import Log

MAX_PROMPT_TEXT_CHARS = 8000
MAX_FIELD_HINTS = 20
REVIEW_CONFIDENCE_THRESHOLD = 0.7
DEFAULT_FORM_NAME = "Converted Form"
DEFAULT_CANDIDATE_CONFIDENCE = 0.5

LOW_OVERALL_CONFIDENCE_WARNING = (
    "Low overall confidence in field detection. Manual review recommended."
)


class FieldDetector:
    """Detects and maps form fields from OCR output."""

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
            prompt_template
            if prompt_template is not None
            else load_prompt("field_detection_prompt.txt")
        )

    def detect_fields(self, ocr_result: OcrResult) -> FieldDetectionResult:
        warnings: list[str] = []

        enhanced = self.enhance(ocr_result)
        merged = merge_field_detections(ocr_result.structure.fields, enhanced.fields)
        fields = _dedupe_slugs([map_to_form_field(c, i) for i, c in enumerate(merged)])

        sections = list(dict.fromkeys(f.section for f in fields if f.section))

        overall_confidence = (
            sum(f.confidence for f in fields) / len(fields) if fields else 0.0
        )
        overall_confidence = max(0.0, min(1.0, overall_confidence))

        if overall_confidence < REVIEW_CONFIDENCE_THRESHOLD:
            warnings.append(LOW_OVERALL_CONFIDENCE_WARNING)

        low_confidence = [f for f in fields if f.confidence < LOW_CONFIDENCE_THRESHOLD]
        if low_confidence:
            warnings.append(
                f"{len(low_confidence)} field(s) have low confidence and may need verification."
            )

        Log.info(
            f"Detected {len(fields)} fields "
            f"(confidence {overall_confidence:.2f}, {len(sections)} sections)"
        )
        return FieldDetectionResult(
            fields=fields,
            suggested_form_name=enhanced.suggested_form_name,
            suggested_form_type=enhanced.suggested_form_type,
            sections=sections,
            warnings=warnings,
            overall_confidence=overall_confidence,
        )

    def enhance(self, ocr_result: OcrResult) -> EnhancementResult:
        """Ask the model for a field list; fall back to OCR fields on any failure."""
        try:
            return self._enhance_with_ai(ocr_result)
        except Exception as exc:
            Log.warning(f"AI field enhancement failed, using OCR fields: {exc}")
            return fallback_enhancement(ocr_result)

    def _enhance_with_ai(self, ocr_result: OcrResult) -> EnhancementResult:
        prompt = self._build_prompt(ocr_result)
        Log.debug(f"Field detection prompt:\n{prompt}")

        raw_response = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt="",
            user_prompt=prompt,
        )
        Log.debug(f"Field detection raw response:\n{raw_response}")

        outcome = parse_json_object(raw_response)
        if outcome.payload is None:
            raise FieldDetectionError(outcome.error or "Unreadable AI response")
        return parse_enhancement(outcome.payload, ocr_result)

    def _build_prompt(self, ocr_result: OcrResult) -> str:
        hints = ocr_result.structure.fields[:MAX_FIELD_HINTS]
        detected = ""
        if hints:
            detected = (
                "\nAlready detected fields:\n"
                + json.dumps([h.to_hint() for h in hints], indent=2)
                + "\n"
            )
        return self._prompt_template.replace(
            "{document_text}", ocr_result.text[:MAX_PROMPT_TEXT_CHARS]
        ).replace("{detected_fields}", detected)


def fallback_enhancement(ocr_result: OcrResult) -> EnhancementResult:
    """Basic proposal built purely from OCR fields."""
    return EnhancementResult(
        suggested_form_name=ocr_result.structure.title or DEFAULT_FORM_NAME,
        suggested_form_type=FormType.CUSTOM.value,
        fields=[
            replace(candidate_from_ocr(f, f.confidence), is_sensitive=False)
            for f in ocr_result.structure.fields
        ],
    )


def parse_enhancement(payload: dict[str, Any], ocr_result: OcrResult) -> EnhancementResult:
    """Build an EnhancementResult from the decoded AI payload.

    Raises:
        FieldDetectionError: when the payload has no usable field list.
    """
    raw_fields = payload.get("fields")
    if not isinstance(raw_fields, list):
        raise FieldDetectionError("'fields' must be a list")

    name = payload.get("suggestedFormName")
    return EnhancementResult(
        suggested_form_name=(
            name.strip()
            if isinstance(name, str) and name.strip()
            else ocr_result.structure.title or DEFAULT_FORM_NAME
        ),
        suggested_form_type=FormType.parse(payload.get("suggestedFormType")).value,
        fields=[
            candidate
            for candidate in (_build_candidate(raw) for raw in raw_fields if isinstance(raw, dict))
            if candidate.label
        ],
    )


def _build_candidate(raw: dict[str, Any]) -> FieldCandidate:
    label = raw.get("label")
    options = raw.get("options")
    confidence = raw.get("confidence")
    return FieldCandidate(
        source="ai",
        label=label.strip() if isinstance(label, str) else "",
        type=_text(raw.get("type")) or "text",
        purpose=_text(raw.get("purpose")) or "OTHER",
        is_required=raw.get("isRequired") is True,
        is_sensitive=raw.get("isSensitive") is True,
        options=[str(o) for o in options] if isinstance(options, list) and options else None,
        section=_text(raw.get("section")),
        help_text=_text(raw.get("helpText")),
        confidence=(
            max(0.0, min(1.0, float(confidence)))
            if isinstance(confidence, (int, float)) and not isinstance(confidence, bool)
            else DEFAULT_CANDIDATE_CONFIDENCE
        ),
    )


def _text(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _dedupe_slugs(fields: list[DetectedField]) -> list[DetectedField]:
    """Suffix repeated slugs with _2, _3, ... so the list keeps unique slugs."""
    seen: set[str] = set()
    result: list[DetectedField] = []
    for f in fields:
        slug = f.slug
        n = 2
        while slug in seen:
            suffix = f"_{n}"
            slug = f"{f.slug[: MAX_SLUG_LENGTH - len(suffix)]}{suffix}"
            n += 1
        seen.add(slug)
        result.append(f if slug == f.slug else replace(f, slug=slug))
    return result
