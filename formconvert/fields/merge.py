"""Two-source merge of OCR-detected and AI-proposed fields.

Pure: no I/O, no AI calls. Confidence rules:
- AI field with an OCR field of the same normalized label: max(ai, ocr) * 0.95
- AI field with no OCR counterpart: unchanged
- OCR field the AI pass missed: ocr * 0.8, purpose OTHER
"""

from dataclasses import replace

from formconvert.extraction.models import DetectedFormElement
from formconvert.fields.mapping import is_sensitive_field, normalize_label
from formconvert.fields.models import FieldCandidate

MATCHED_CONFIDENCE_FACTOR = 0.95
OCR_ONLY_CONFIDENCE_FACTOR = 0.8


def candidate_from_ocr(element: DetectedFormElement, confidence: float) -> FieldCandidate:
    return FieldCandidate(
        source="ocr",
        label=element.label,
        type=element.type,
        purpose="OTHER",
        is_required=bool(element.is_required),
        is_sensitive=is_sensitive_field(element.label),
        confidence=confidence,
        bounding_box=element.bounding_box,
    )


def merge_field_detections(
    ocr_fields: list[DetectedFormElement],
    ai_fields: list[FieldCandidate],
) -> list[FieldCandidate]:
    """Merge AI fields with OCR fields; AI order first, then OCR leftovers in document order."""
    # later OCR fields with the same label replace earlier ones
    ocr_by_label = {normalize_label(f.label): f for f in ocr_fields}

    merged: list[FieldCandidate] = []
    for ai_field in ai_fields:
        key = normalize_label(ai_field.label)
        ocr_field = ocr_by_label.pop(key, None)
        if ocr_field is None:
            merged.append(ai_field)
            continue
        merged.append(
            replace(
                ai_field,
                source="merged",
                confidence=max(ai_field.confidence, ocr_field.confidence)
                * MATCHED_CONFIDENCE_FACTOR,
                bounding_box=ocr_field.bounding_box or ai_field.bounding_box,
            )
        )

    for ocr_field in ocr_by_label.values():
        merged.append(
            candidate_from_ocr(ocr_field, ocr_field.confidence * OCR_ONLY_CONFIDENCE_FACTOR)
        )
    return merged
