import json
from unittest.mock import MagicMock

import pytest

from formconvert.ai.client_base import BaseAiClient
from formconvert.ai.exceptions import AiNetworkError
from formconvert.extraction.models import DetectedFormElement, DocumentStructure, OcrResult
from formconvert.fields.detector import (
    LOW_OVERALL_CONFIDENCE_WARNING,
    FieldDetector,
    fallback_enhancement,
    parse_enhancement,
)
from formconvert.fields.exceptions import FieldDetectionError
from formconvert.fields.models import FieldPurpose, FieldType

AI_PAYLOAD = {
    "suggestedFormName": "Client Intake",
    "suggestedFormType": "intake",
    "fields": [
        {
            "label": "Client Name",
            "type": "text",
            "purpose": "INTERNAL_OPS",
            "isRequired": True,
            "section": "Client",
            "confidence": 0.9,
        },
        {
            "label": "Social Security Number",
            "type": "text",
            "purpose": "COMPLIANCE",
            "isSensitive": False,
            "section": "Client",
            "confidence": 0.95,
        },
        {
            "label": "Preferred Contact",
            "type": "dropdown",
            "options": ["Phone", "Email"],
            "section": "Contact",
            "confidence": 0.85,
        },
    ],
}


def _ocr_result(
    fields: list[DetectedFormElement] | None = None,
    text: str = "CLIENT INTAKE\nClient Name: ____",
    title: str | None = None,
) -> OcrResult:
    return OcrResult(
        text=text,
        page_count=1,
        is_scanned=False,
        confidence=0.95,
        structure=DocumentStructure(title=title, fields=fields or []),
    )


def _make_detector(response: str | Exception) -> tuple[FieldDetector, MagicMock]:
    client = MagicMock(spec=BaseAiClient)
    if isinstance(response, Exception):
        client.create_chat_completion.side_effect = response
    else:
        client.create_chat_completion.return_value = response
    detector = FieldDetector(
        client=client,
        model="text-model",
        prompt_template="TEXT:\n{document_text}\n{detected_fields}\nJSON {\"fields\": []}",
    )
    return detector, client


class TestDetectFields:
    def test_maps_ai_fields(self) -> None:
        detector, _client = _make_detector(json.dumps(AI_PAYLOAD))

        result = detector.detect_fields(_ocr_result())

        assert [f.slug for f in result.fields] == [
            "client_name",
            "social_security_number",
            "preferred_contact",
        ]
        assert result.suggested_form_name == "Client Intake"
        assert result.suggested_form_type == "INTAKE"
        assert result.sections == ["Client", "Contact"]
        contact = result.fields[2]
        assert contact.type == FieldType.DROPDOWN
        assert contact.options == ["Phone", "Email"]
        assert result.fields[0].purpose == FieldPurpose.INTERNAL_OPS
        assert [f.order for f in result.fields] == [0, 1, 2]

    def test_sensitive_label_overrides_ai(self) -> None:
        detector, _client = _make_detector(json.dumps(AI_PAYLOAD))

        result = detector.detect_fields(_ocr_result())

        ssn = next(f for f in result.fields if f.slug == "social_security_number")
        assert ssn.is_sensitive is True

    def test_high_confidence_has_no_warning(self) -> None:
        detector, _client = _make_detector(json.dumps(AI_PAYLOAD))

        result = detector.detect_fields(_ocr_result())

        assert result.overall_confidence == pytest.approx((0.9 + 0.95 + 0.85) / 3)
        assert result.warnings == []

    def test_merges_with_ocr_fields(self) -> None:
        detector, _client = _make_detector(json.dumps(AI_PAYLOAD))
        ocr_fields = [
            DetectedFormElement(type="text_field", label="Client Name:", confidence=0.7),
            DetectedFormElement(type="signature", label="Signature", confidence=0.7),
        ]

        result = detector.detect_fields(_ocr_result(ocr_fields))

        assert result.fields[0].confidence == pytest.approx(0.9 * 0.95)
        signature = result.fields[-1]
        assert signature.slug == "signature"
        assert signature.type == FieldType.SIGNATURE
        assert signature.confidence == pytest.approx(0.7 * 0.8)

    def test_low_confidence_adds_warnings(self) -> None:
        payload = {
            "fields": [
                {"label": "Notes", "confidence": 0.3},
                {"label": "Other", "confidence": 0.65},
            ]
        }
        detector, _client = _make_detector(json.dumps(payload))

        result = detector.detect_fields(_ocr_result())

        assert 0.0 <= result.overall_confidence <= 1.0
        assert LOW_OVERALL_CONFIDENCE_WARNING in result.warnings
        assert "1 field(s) have low confidence and may need verification." in result.warnings

    def test_no_fields_means_zero_confidence(self) -> None:
        detector, _client = _make_detector(json.dumps({"fields": []}))

        result = detector.detect_fields(_ocr_result())

        assert result.fields == []
        assert result.overall_confidence == 0.0
        assert result.warnings == [LOW_OVERALL_CONFIDENCE_WARNING]

    def test_repeated_labels_get_unique_slugs(self) -> None:
        payload = {
            "fields": [
                {"label": "Name", "confidence": 0.9},
                {"label": "Name!", "confidence": 0.9},
                {"label": "name?", "confidence": 0.9},
            ]
        }
        detector, _client = _make_detector(json.dumps(payload))

        result = detector.detect_fields(_ocr_result())

        assert [f.slug for f in result.fields] == ["name", "name_2", "name_3"]


class TestEnhanceFallback:
    @pytest.mark.parametrize(
        "response",
        [
            "not json",
            json.dumps({"fields": "nope"}),
            json.dumps(["a"]),
            AiNetworkError("AI provider network error"),
        ],
    )
    def test_falls_back_to_ocr_fields(self, response: str | Exception) -> None:
        detector, _client = _make_detector(response)
        ocr_fields = [DetectedFormElement(type="date", label="Visit Date", confidence=0.7)]

        result = detector.detect_fields(_ocr_result(ocr_fields, title="Visit Log"))

        assert result.suggested_form_name == "Visit Log"
        assert result.suggested_form_type == "CUSTOM"
        assert [f.slug for f in result.fields] == ["visit_date"]
        assert result.fields[0].type == FieldType.DATE
        assert result.fields[0].purpose == FieldPurpose.OTHER

    def test_fallback_without_title_uses_default_name(self) -> None:
        enhancement = fallback_enhancement(_ocr_result())
        assert enhancement.suggested_form_name == "Converted Form"
        assert enhancement.fields == []


class TestParseEnhancement:
    def test_unknown_form_type_becomes_custom(self) -> None:
        result = parse_enhancement(
            {"suggestedFormType": "survey", "fields": []}, _ocr_result()
        )
        assert result.suggested_form_type == "CUSTOM"

    def test_missing_fields_list_raises(self) -> None:
        with pytest.raises(FieldDetectionError):
            parse_enhancement({"suggestedFormName": "X"}, _ocr_result())

    def test_candidate_defaults(self) -> None:
        result = parse_enhancement({"fields": [{"label": " Age "}]}, _ocr_result())
        candidate = result.fields[0]
        assert candidate.source == "ai"
        assert candidate.label == "Age"
        assert candidate.type == "text"
        assert candidate.purpose == "OTHER"
        assert candidate.confidence == 0.5
        assert candidate.options is None

    def test_candidates_without_label_are_dropped(self) -> None:
        result = parse_enhancement(
            {"fields": [{"label": ""}, {"type": "date"}, {"label": "Visit Date"}]}, _ocr_result()
        )
        assert [c.label for c in result.fields] == ["Visit Date"]


class TestBuildPrompt:
    def test_prompt_includes_text_and_hints(self) -> None:
        detector, client = _make_detector(json.dumps({"fields": []}))
        ocr_fields = [DetectedFormElement(type="date", label="Visit Date", confidence=0.7)]

        detector.detect_fields(_ocr_result(ocr_fields, text="VISIT LOG"))

        prompt = client.create_chat_completion.call_args.kwargs["user_prompt"]
        assert "VISIT LOG" in prompt
        assert '"label": "Visit Date"' in prompt
        assert 'JSON {"fields": []}' in prompt

    def test_prompt_truncates_text_and_hints(self) -> None:
        detector, client = _make_detector(json.dumps({"fields": []}))
        ocr_fields = [
            DetectedFormElement(type="text_field", label=f"Field {i}", confidence=0.7)
            for i in range(30)
        ]

        detector.detect_fields(_ocr_result(ocr_fields, text="x" * 9000))

        prompt = client.create_chat_completion.call_args.kwargs["user_prompt"]
        assert "x" * 8000 in prompt
        assert "x" * 8001 not in prompt
        assert "Field 19" in prompt
        assert "Field 20" not in prompt
