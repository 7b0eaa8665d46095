"""Lookup tables and label helpers shared by field detection and duplicate detection."""

import re
import time

from formconvert.fields.models import DetectedField, FieldCandidate, FieldPurpose, FieldType

MAX_SLUG_LENGTH = 50

_FIELD_TYPES: dict[str, FieldType] = {
    "text": FieldType.TEXT_SHORT,
    "text_field": FieldType.TEXT_SHORT,
    "string": FieldType.TEXT_SHORT,
    "textarea": FieldType.TEXT_LONG,
    "long_text": FieldType.TEXT_LONG,
    "number": FieldType.NUMBER,
    "numeric": FieldType.NUMBER,
    "integer": FieldType.NUMBER,
    "date": FieldType.DATE,
    "phone": FieldType.PHONE,
    "telephone": FieldType.PHONE,
    "email": FieldType.EMAIL,
    "address": FieldType.ADDRESS,
    "dropdown": FieldType.DROPDOWN,
    "select": FieldType.DROPDOWN,
    # single-select radio groups render as dropdowns
    "radio": FieldType.DROPDOWN,
    "checkbox": FieldType.CHECKBOX,
    "yes_no": FieldType.YES_NO,
    "boolean": FieldType.YES_NO,
    "signature": FieldType.SIGNATURE,
    "sign": FieldType.SIGNATURE,
    "file": FieldType.FILE,
    "upload": FieldType.FILE,
}

_FIELD_PURPOSES: dict[str, FieldPurpose] = {
    "grant_requirement": FieldPurpose.GRANT_REQUIREMENT,
    "grant": FieldPurpose.GRANT_REQUIREMENT,
    "internal_ops": FieldPurpose.INTERNAL_OPS,
    "internal": FieldPurpose.INTERNAL_OPS,
    "compliance": FieldPurpose.COMPLIANCE,
    "outcome_measurement": FieldPurpose.OUTCOME_MEASUREMENT,
    "outcome": FieldPurpose.OUTCOME_MEASUREMENT,
    "risk_assessment": FieldPurpose.RISK_ASSESSMENT,
    "risk": FieldPurpose.RISK_ASSESSMENT,
    "other": FieldPurpose.OTHER,
}

_SENSITIVE_PATTERNS = [
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"ssn|social\s*security",
        r"\bdob\b|date\s*of\s*birth|birth\s*date",
        r"driver.*license|license\s*number",
        r"passport",
        r"bank\s*account|routing\s*number|account\s*number",
        r"credit\s*card|card\s*number",
        r"\bpin\b|password",
        r"income|salary|wage",
        r"medical|diagnosis|prescription|health\s*condition",
        r"criminal|arrest|conviction",
        r"immigration|visa\s*status|alien",
    )
]


def map_field_type(value: str) -> FieldType:
    return _FIELD_TYPES.get(value.strip().lower(), FieldType.TEXT_SHORT)


def map_field_purpose(value: str) -> FieldPurpose:
    return _FIELD_PURPOSES.get(value.strip().lower(), FieldPurpose.OTHER)


def normalize_label(label: str) -> str:
    """Lowercase and drop everything but ASCII letters and digits."""
    return re.sub(r"[^a-z0-9]", "", label.lower())


def is_sensitive_field(label: str) -> bool:
    """True when the label names PII/PHI such as SSN, DOB, income or diagnosis."""
    return any(pattern.search(label) for pattern in _SENSITIVE_PATTERNS)


def generate_slug(label: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", label.lower()).strip("_")
    slug = slug[:MAX_SLUG_LENGTH].rstrip("_")
    return slug or f"field_{int(time.time() * 1000)}"


def map_to_form_field(candidate: FieldCandidate, index: int) -> DetectedField:
    """Canonicalize one merged candidate into a DetectedField at position index."""
    return DetectedField(
        slug=generate_slug(candidate.label),
        name=candidate.label,
        type=map_field_type(candidate.type),
        purpose=map_field_purpose(candidate.purpose),
        help_text=candidate.help_text,
        is_required=candidate.is_required,
        is_sensitive=candidate.is_sensitive or is_sensitive_field(candidate.label),
        options=candidate.options,
        section=candidate.section,
        order=index,
        confidence=max(0.0, min(1.0, candidate.confidence)),
        source_label=candidate.label,
        source_position=candidate.bounding_box,
    )
