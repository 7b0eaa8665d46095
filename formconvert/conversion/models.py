from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from formconvert.duplicates.models import DuplicateCheckResult
from formconvert.extraction.models import OcrResult
from formconvert.fields.models import DetectedField, FieldDetectionResult


class SourceType(str, Enum):
    PHOTO = "PHOTO"
    PDF_CLEAN = "PDF_CLEAN"
    PDF_SCANNED = "PDF_SCANNED"


class ConversionStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class FormType(str, Enum):
    INTAKE = "INTAKE"
    FOLLOWUP = "FOLLOWUP"
    REFERRAL = "REFERRAL"
    ASSESSMENT = "ASSESSMENT"
    CUSTOM = "CUSTOM"

    @classmethod
    def parse(cls, value: object) -> "FormType":
        """Map free text to a form type, defaulting to CUSTOM."""
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        return cls.CUSTOM


@dataclass(frozen=True)
class Conversion:
    """One attempt to turn an uploaded document into a field schema."""

    id: str
    org_id: str
    created_by_id: str
    source_type: SourceType
    source_path: str
    mime_type: str
    original_filename: str
    status: ConversionStatus
    expires_at: datetime
    detected_fields: list[DetectedField] = field(default_factory=list)
    confidence: float | None = None
    warnings: list[str] = field(default_factory=list)
    requires_original_export: bool = False
    result_form_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ConversionInput:
    """An upload as received from the application layer."""

    org_id: str
    user_id: str
    filename: str
    mime_type: str
    content: bytes


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of starting or processing a conversion."""

    conversion_id: str
    status: ConversionStatus
    warnings: list[str] = field(default_factory=list)
    ocr_result: OcrResult | None = None
    field_result: FieldDetectionResult | None = None
    duplicate_check: DuplicateCheckResult | None = None
    error: str | None = None


@dataclass(frozen=True)
class CreateFormOptions:
    name: str | None = None
    description: str | None = None
    type: str | None = None
    selected_fields: list[str] | None = None


@dataclass(frozen=True)
class FormSummary:
    id: str
    name: str
    status: str | None = None


@dataclass(frozen=True)
class UserSummary:
    id: str
    name: str | None = None


@dataclass(frozen=True)
class ConversionStatusView:
    """A conversion together with its linked form and creator."""

    conversion: Conversion
    result_form: FormSummary | None = None
    created_by: UserSummary | None = None


@dataclass(frozen=True)
class ConversionPage:
    items: list[ConversionStatusView]
    total: int
