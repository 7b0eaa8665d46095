from formconvert.ai.factory import AiClientFactory
from formconvert.config.settings import Settings
from formconvert.conversion.exceptions import ConversionStateError
from formconvert.conversion.models import Conversion, ConversionResult, ConversionStatus
from formconvert.conversion.pipeline import PipelineContext, PipelineStep
from formconvert.conversion.steps import (
    CheckDuplicatesStep,
    DetectFieldsStep,
    ExtractDocumentStep,
    LoadSourceStep,
    MarkFailedStep,
    PersistReviewStep,
    ValidateFieldsStep,
)
from formconvert.database.repositories.conversion_repository import ConversionRepository
from formconvert.database.repositories.form_repository import FormRepository
from formconvert.duplicates.detector import DuplicateDetector
from formconvert.duplicates.models import SimilarityThresholds
from formconvert.extraction.extractor import DocumentExtractor
from formconvert.extraction.vision import VisionExtractor
from formconvert.fields.detector import FieldDetector
from formconvert.logging.logger import Log
from formconvert.pdf.factory import PdfExtractorFactory
from formconvert.pdf.renderer import PdfPageRenderer
from formconvert.security.policy import UploadPolicy
from formconvert.security.validator import SecurityValidator
from formconvert.storage.base import BaseBlobStore
from formconvert.storage.factory import BlobStoreFactory

DISCARDED_MESSAGE = "Conversion was deleted during processing"


class ConversionProcessor:
    """Runs one PENDING conversion through extraction, detection and review.

    Pipeline: claim -> load -> extract -> detect -> validate -> duplicates -> persist.
    """

    def __init__(
        self,
        conversion_repo: ConversionRepository,
        steps: list[PipelineStep],
        failed_step: PipelineStep,
    ) -> None:
        self._conversion_repo = conversion_repo
        self._steps = steps
        self._failed_step = failed_step

    def process(self, conversion: Conversion) -> ConversionResult:
        """Claim the conversion and run every step.

        Failures inside the pipeline never propagate: the conversion is marked
        FAILED and the error is returned in the result. Only a lost claim raises.

        Raises:
            ConversionStateError: if the conversion stopped being PENDING
                before it could be claimed.
        """
        if not self._conversion_repo.mark_processing(conversion.id):
            raise ConversionStateError(
                f"Conversion {conversion.id} is no longer pending"
            )
        Log.info(f"Processing conversion {conversion.id} ({conversion.source_type.value})")

        context = PipelineContext(
            conversion=conversion,
            source_type=conversion.source_type,
            warnings=list(conversion.warnings),
        )
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            Log.exception(f"Conversion {conversion.id} failed")
            context.error_message = str(exc) or exc.__class__.__name__
            return self._fail(context)

        if context.discarded:
            return ConversionResult(
                conversion_id=conversion.id,
                status=ConversionStatus.FAILED,
                warnings=context.warnings,
                error=DISCARDED_MESSAGE,
            )

        Log.info(f"Conversion {conversion.id} ready for review")
        return ConversionResult(
            conversion_id=conversion.id,
            status=ConversionStatus.REVIEW_REQUIRED,
            warnings=context.warnings,
            ocr_result=context.ocr_result,
            field_result=context.field_result,
            duplicate_check=context.duplicate_check,
        )

    def _fail(self, context: PipelineContext) -> ConversionResult:
        try:
            self._failed_step.run(context)
        except Exception:
            Log.exception(f"Could not mark conversion {context.conversion_id} as failed")
        return ConversionResult(
            conversion_id=context.conversion_id,
            status=ConversionStatus.FAILED,
            warnings=[*context.warnings, context.error_message],
            ocr_result=context.ocr_result,
            field_result=context.field_result,
            duplicate_check=context.duplicate_check,
            error=DISCARDED_MESSAGE if context.discarded else context.error_message,
        )


def build_document_extractor(settings: Settings) -> DocumentExtractor:
    client = AiClientFactory.create(settings)
    return DocumentExtractor(
        pdf_extractor=PdfExtractorFactory.create(settings),
        renderer=PdfPageRenderer(),
        vision=VisionExtractor(
            client=client,
            model=AiClientFactory.model_name(settings),
            temperature=settings.ai_temperature,
        ),
        validator=SecurityValidator(UploadPolicy.from_settings(settings)),
        max_vision_pages=settings.vision_max_pages,
    )


def build_duplicate_detector(
    settings: Settings, form_repo: FormRepository | None = None
) -> DuplicateDetector:
    return DuplicateDetector(
        form_repo if form_repo is not None else FormRepository(),
        thresholds=SimilarityThresholds(
            exact=settings.similarity_exact,
            high=settings.similarity_high,
            medium=settings.similarity_medium,
            low=settings.similarity_low,
        ),
        similar_forms_limit=settings.similar_forms_limit,
    )


def build_processor(
    settings: Settings,
    conversion_repo: ConversionRepository | None = None,
    blob_store: BaseBlobStore | None = None,
) -> ConversionProcessor:
    """Build a ConversionProcessor with all required adapters."""
    conversion_repo = conversion_repo if conversion_repo is not None else ConversionRepository()
    blob_store = blob_store if blob_store is not None else BlobStoreFactory.create(settings)
    field_detector = FieldDetector(
        client=AiClientFactory.create(settings),
        model=AiClientFactory.model_name(settings),
        temperature=settings.ai_temperature,
    )
    steps: list[PipelineStep] = [
        LoadSourceStep(blob_store),
        ExtractDocumentStep(build_document_extractor(settings), conversion_repo),
        DetectFieldsStep(field_detector),
        ValidateFieldsStep(),
        CheckDuplicatesStep(build_duplicate_detector(settings)),
        PersistReviewStep(conversion_repo),
    ]
    return ConversionProcessor(
        conversion_repo=conversion_repo,
        steps=steps,
        failed_step=MarkFailedStep(conversion_repo),
    )
