from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from formconvert.conversion.models import Conversion, SourceType
from formconvert.duplicates.models import DuplicateCheckResult
from formconvert.extraction.models import OcrResult
from formconvert.fields.models import FieldDetectionResult


@dataclass(slots=True)
class PipelineContext:
    conversion: Conversion
    source_type: SourceType
    raw_bytes: bytes = b""
    ocr_result: OcrResult | None = None
    field_result: FieldDetectionResult | None = None
    duplicate_check: DuplicateCheckResult | None = None
    warnings: list[str] = field(default_factory=list)
    error_message: str = ""
    discarded: bool = False

    @property
    def conversion_id(self) -> str:
        return self.conversion.id


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
