from dataclasses import dataclass, field

from formconvert.conversion.models import SourceType


@dataclass(frozen=True)
class FileValidationResult:
    is_valid: bool
    source_type: SourceType | None
    error: str | None = None
    warnings: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PdfThreatScan:
    is_safe: bool
    threats: list[str] = field(default_factory=list)
