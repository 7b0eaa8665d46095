from formconvert.conversion.exceptions import FieldValidationError
from formconvert.conversion.models import SourceType
from formconvert.conversion.pipeline import PipelineContext, PipelineStep
from formconvert.database.repositories.conversion_repository import ConversionRepository
from formconvert.duplicates.detector import DuplicateDetector, get_match_type_description
from formconvert.extraction.extractor import DocumentExtractor
from formconvert.fields.detector import FieldDetector
from formconvert.fields.validator import validate_detected_fields
from formconvert.logging.logger import Log
from formconvert.storage.base import BaseBlobStore


class LoadSourceStep(PipelineStep):
    def __init__(self, blob_store: BaseBlobStore) -> None:
        self._blob_store = blob_store

    def run(self, context: PipelineContext) -> PipelineContext:
        context.raw_bytes = self._blob_store.get(context.conversion.source_path)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes for conversion {context.conversion_id}")
        return context


class ExtractDocumentStep(PipelineStep):
    def __init__(
        self,
        extractor: DocumentExtractor,
        conversion_repo: ConversionRepository,
    ) -> None:
        self._extractor = extractor
        self._conversion_repo = conversion_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.source_type == SourceType.PHOTO:
            ocr_result = self._extractor.extract_from_image(
                context.raw_bytes, context.conversion.mime_type
            )
        else:
            ocr_result = self._extractor.extract_from_pdf(context.raw_bytes)
            if ocr_result.is_scanned and context.source_type == SourceType.PDF_CLEAN:
                self._conversion_repo.update_source_type(
                    context.conversion_id, SourceType.PDF_SCANNED
                )
                context.source_type = SourceType.PDF_SCANNED
                Log.info(f"Conversion {context.conversion_id} reclassified as PDF_SCANNED")

        context.ocr_result = ocr_result
        Log.info(
            f"Extracted {len(ocr_result.text)} chars and "
            f"{len(ocr_result.structure.fields)} form elements from conversion "
            f"{context.conversion_id}"
        )
        return context


class DetectFieldsStep(PipelineStep):
    def __init__(self, field_detector: FieldDetector) -> None:
        self._field_detector = field_detector

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.ocr_result is None:
            raise ValueError("PipelineContext.ocr_result must be set before field detection")
        context.field_result = self._field_detector.detect_fields(context.ocr_result)
        context.warnings.extend(context.field_result.warnings)
        return context


class ValidateFieldsStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        if context.field_result is None:
            raise ValueError("PipelineContext.field_result must be set before validation")
        validation = validate_detected_fields(context.field_result.fields)
        context.warnings.extend(validation.warnings)
        if not validation.is_valid:
            raise FieldValidationError(
                f"Field validation failed: {', '.join(validation.errors)}"
            )
        return context


class CheckDuplicatesStep(PipelineStep):
    def __init__(self, duplicate_detector: DuplicateDetector) -> None:
        self._duplicate_detector = duplicate_detector

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.field_result is None:
            raise ValueError("PipelineContext.field_result must be set before duplicate check")
        check = self._duplicate_detector.check_for_duplicates(
            context.conversion.org_id, context.field_result.fields
        )
        context.duplicate_check = check
        if check.match_type in ("exact", "high", "medium"):
            context.warnings.append(
                f"{get_match_type_description(check.match_type)} "
                f"(\"{check.duplicate_form_name}\", similarity {check.similarity:.0%})"
            )
        Log.info(
            f"Duplicate check for conversion {context.conversion_id}: "
            f"{check.match_type} ({check.similarity:.2f})"
        )
        return context


class PersistReviewStep(PipelineStep):
    """Store the detected schema and hand the conversion to a human reviewer.

    Every successful run ends in REVIEW_REQUIRED regardless of confidence or
    duplicate outcome; those only add warnings.
    """

    def __init__(self, conversion_repo: ConversionRepository) -> None:
        self._conversion_repo = conversion_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.field_result is None:
            raise ValueError("PipelineContext.field_result must be set before persist")
        saved = self._conversion_repo.save_review_result(
            context.conversion_id,
            detected_fields=context.field_result.fields,
            confidence=context.field_result.overall_confidence,
            warnings=context.warnings,
            requires_original_export=context.source_type != SourceType.PHOTO,
        )
        if not saved:
            context.discarded = True
            Log.warning(
                f"Conversion {context.conversion_id} was removed during processing, "
                "discarding result"
            )
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, conversion_repo: ConversionRepository) -> None:
        self._conversion_repo = conversion_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        warnings = [*context.warnings, context.error_message]
        if not self._conversion_repo.mark_failed(context.conversion_id, warnings):
            context.discarded = True
            Log.warning(f"Conversion {context.conversion_id} no longer exists, not marking failed")
            return context
        Log.error(f"Conversion {context.conversion_id} failed: {context.error_message}")
        return context
