"""Line-level heuristics that recover form structure from a native PDF text layer."""

import re

from formconvert.extraction.models import (
    DetectedFormElement,
    DocumentSection,
    DocumentStructure,
    ElementType,
)

NATIVE_FIELD_CONFIDENCE = 0.7
NATIVE_CHECKBOX_CONFIDENCE = 0.85

_FIELD_LINE = re.compile(r"^(.+?):\s*(_+|\.+)?\s*$")
_NUMBERED_HEADING = re.compile(r"^\d+\.\s+[A-Z]")
_CHECKBOX_LINE = re.compile(r"^(\[[\sxX]?\]|[☐☑□▢])")
_CHECKBOX_PREFIX = re.compile(r"^(\[[\sxX]?\]|[☐☑□▢])\s*")
_CHECKED_PREFIX = re.compile(r"^(\[[xX]\]|☑)")

_ELEMENT_TYPES: dict[str, ElementType] = {
    "text_field": "text_field",
    "text": "text_field",
    "string": "text_field",
    "checkbox": "checkbox",
    "check": "checkbox",
    "radio": "radio",
    "dropdown": "dropdown",
    "select": "dropdown",
    "signature": "signature",
    "sign": "signature",
    "date": "date",
    "number": "number",
    "numeric": "number",
    "integer": "number",
}

_TYPE_KEYWORDS: list[tuple[re.Pattern[str], ElementType]] = [
    (re.compile(r"date|dob|birth|when"), "date"),
    (re.compile(r"sign|signature"), "signature"),
    (re.compile(r"phone|tel|mobile|fax|zip|ssn|number|amount|age|qty|quantity"), "number"),
]


def map_element_type(value: object) -> ElementType:
    """Normalize a free-text element type; unknown values become text_field."""
    if not isinstance(value, str):
        return "text_field"
    return _ELEMENT_TYPES.get(value.strip().lower(), "text_field")


def guess_field_type(label: str) -> ElementType:
    lowered = label.lower()
    for pattern, element_type in _TYPE_KEYWORDS:
        if pattern.search(lowered):
            return element_type
    return "text_field"


def is_heading(line: str) -> bool:
    if len(line) > 3 and line == line.upper() and re.search(r"[A-Z]", line):
        return True
    if line.endswith(":") and len(line) < 50:
        return True
    return bool(_NUMBERED_HEADING.match(line))


def parse_text_structure(text: str) -> DocumentStructure:
    """Split text into sections and pick out labelled blanks and checkboxes.

    A line can be both a heading and a field ("Name:" opens a section and is
    also a fillable label); both interpretations are kept.
    """
    sections: list[DocumentSection] = []
    fields: list[DetectedFormElement] = []

    heading: str | None = None
    content: list[str] = []
    in_section = False

    lines = [line.strip() for line in text.split("\n")]
    for line in (line for line in lines if line):
        if is_heading(line):
            if in_section:
                sections.append(DocumentSection(heading=heading, content=" ".join(content)))
            heading = re.sub(r":$", "", line)
            content = []
            in_section = True
        elif in_section:
            content.append(line)

        field_match = _FIELD_LINE.match(line)
        if field_match:
            label = field_match.group(1).strip()
            fields.append(
                DetectedFormElement(
                    type=guess_field_type(label),
                    label=label,
                    confidence=NATIVE_FIELD_CONFIDENCE,
                )
            )

        checkbox_label = _CHECKBOX_PREFIX.sub("", line).strip()
        if _CHECKBOX_LINE.match(line) and checkbox_label:
            fields.append(
                DetectedFormElement(
                    type="checkbox",
                    label=checkbox_label,
                    value="true" if _CHECKED_PREFIX.match(line) else None,
                    confidence=NATIVE_CHECKBOX_CONFIDENCE,
                )
            )

    if in_section:
        sections.append(DocumentSection(heading=heading, content=" ".join(content)))

    return DocumentStructure(sections=sections, tables=[], fields=fields)
