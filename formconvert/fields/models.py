from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from formconvert.extraction.models import BoundingBox


class FieldType(str, Enum):
    TEXT_SHORT = "TEXT_SHORT"
    TEXT_LONG = "TEXT_LONG"
    NUMBER = "NUMBER"
    DATE = "DATE"
    PHONE = "PHONE"
    EMAIL = "EMAIL"
    ADDRESS = "ADDRESS"
    DROPDOWN = "DROPDOWN"
    CHECKBOX = "CHECKBOX"
    YES_NO = "YES_NO"
    SIGNATURE = "SIGNATURE"
    FILE = "FILE"


class FieldPurpose(str, Enum):
    GRANT_REQUIREMENT = "GRANT_REQUIREMENT"
    INTERNAL_OPS = "INTERNAL_OPS"
    COMPLIANCE = "COMPLIANCE"
    OUTCOME_MEASUREMENT = "OUTCOME_MEASUREMENT"
    RISK_ASSESSMENT = "RISK_ASSESSMENT"
    OTHER = "OTHER"


CandidateSource = Literal["ai", "ocr", "merged"]


@dataclass(frozen=True)
class FieldCandidate:
    """A proposed field before canonicalization, tagged with where it came from.

    `type` and `purpose` are still free text here; mapping to the enums
    happens once, after merging.
    """

    source: CandidateSource
    label: str
    type: str
    confidence: float
    purpose: str = "OTHER"
    is_required: bool = False
    is_sensitive: bool = False
    options: list[str] | None = None
    section: str | None = None
    help_text: str | None = None
    bounding_box: BoundingBox | None = None


@dataclass(frozen=True)
class DetectedField:
    """A canonical field proposed for the new form."""

    slug: str
    name: str
    type: FieldType
    purpose: FieldPurpose
    is_required: bool
    is_sensitive: bool
    order: int
    confidence: float
    source_label: str
    purpose_note: str | None = None
    help_text: str | None = None
    options: list[str] | None = None
    section: str | None = None
    source_position: BoundingBox | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON form stored in the conversion's detected_fields column."""
        return {
            "slug": self.slug,
            "name": self.name,
            "type": self.type.value,
            "purpose": self.purpose.value,
            "purposeNote": self.purpose_note,
            "helpText": self.help_text,
            "isRequired": self.is_required,
            "isSensitive": self.is_sensitive,
            "options": self.options,
            "section": self.section,
            "order": self.order,
            "confidence": self.confidence,
            "sourceLabel": self.source_label,
            "sourcePosition": self.source_position.to_dict() if self.source_position else None,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "DetectedField":
        return cls(
            slug=raw["slug"],
            name=raw["name"],
            type=FieldType(raw["type"]),
            purpose=FieldPurpose(raw.get("purpose") or FieldPurpose.OTHER.value),
            purpose_note=raw.get("purposeNote"),
            help_text=raw.get("helpText"),
            is_required=bool(raw.get("isRequired", False)),
            is_sensitive=bool(raw.get("isSensitive", False)),
            options=raw.get("options"),
            section=raw.get("section"),
            order=int(raw.get("order", 0)),
            confidence=float(raw.get("confidence", 0.0)),
            source_label=raw.get("sourceLabel") or raw["name"],
            source_position=BoundingBox.from_dict(raw.get("sourcePosition")),
        )


@dataclass(frozen=True)
class EnhancementResult:
    """What the AI pass proposes for the whole document."""

    suggested_form_name: str
    suggested_form_type: str
    fields: list[FieldCandidate] = field(default_factory=list)


@dataclass(frozen=True)
class FieldDetectionResult:
    fields: list[DetectedField]
    suggested_form_name: str
    suggested_form_type: str
    sections: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    overall_confidence: float = 0.0


@dataclass(frozen=True)
class FieldValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
