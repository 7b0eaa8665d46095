import uuid
from datetime import datetime, timedelta, timezone

from formconvert.config.settings import Settings
from formconvert.conversion.exceptions import (
    ConversionNotFoundError,
    ConversionStateError,
    EmptyFieldSelectionError,
    FeatureDisabledError,
)
from formconvert.conversion.models import (
    Conversion,
    ConversionInput,
    ConversionPage,
    ConversionResult,
    ConversionStatus,
    ConversionStatusView,
    CreateFormOptions,
    FormType,
    SourceType,
)
from formconvert.conversion.processor import ConversionProcessor, build_processor
from formconvert.database.models import NewForm, NewFormField
from formconvert.database.repositories.conversion_repository import ConversionRepository
from formconvert.database.repositories.feature_flag_repository import (
    PHOTO_TO_FORM,
    FeatureFlagRepository,
)
from formconvert.database.repositories.form_repository import FormRepository
from formconvert.duplicates.similarity import generate_field_fingerprint
from formconvert.fields.models import DetectedField
from formconvert.logging.logger import Log
from formconvert.security.exceptions import (
    FileValidationError,
    MagicBytesMismatchError,
    PdfThreatError,
)
from formconvert.security.policy import UploadPolicy
from formconvert.security.validator import SecurityValidator
from formconvert.storage.base import BaseBlobStore, conversion_source_key
from formconvert.storage.factory import BlobStoreFactory

DEFAULT_FORM_NAME = "Converted Form"

_FORM_CREATION_STATUSES = (ConversionStatus.REVIEW_REQUIRED, ConversionStatus.COMPLETED)


class ConversionService:
    """Owns the conversion lifecycle.

    PENDING -> PROCESSING -> REVIEW_REQUIRED | FAILED, then
    REVIEW_REQUIRED -> COMPLETED once a reviewer accepts the fields and a
    form is created. Uploads are validated before anything is written.
    """

    def __init__(
        self,
        *,
        validator: SecurityValidator,
        blob_store: BaseBlobStore,
        conversion_repo: ConversionRepository,
        form_repo: FormRepository,
        feature_flags: FeatureFlagRepository,
        processor: ConversionProcessor,
        ttl_days: int = 7,
    ) -> None:
        self._validator = validator
        self._blob_store = blob_store
        self._conversion_repo = conversion_repo
        self._form_repo = form_repo
        self._feature_flags = feature_flags
        self._processor = processor
        self._ttl_days = ttl_days

    def start_conversion(self, upload: ConversionInput) -> ConversionResult:
        """Validate an upload, store it and create a PENDING conversion.

        Raises:
            FeatureDisabledError: if the org does not have photo-to-form enabled.
            FileValidationError: if filename, MIME type or size are rejected.
            MagicBytesMismatchError: if the content is not what the MIME type claims.
            PdfThreatError: if a PDF carries active content.
        """
        if not self._feature_flags.is_enabled(upload.org_id, PHOTO_TO_FORM):
            raise FeatureDisabledError(
                "Photo-to-form conversion is not enabled for this organization"
            )

        validation = self._validator.validate_file(
            upload.filename, upload.mime_type, len(upload.content)
        )
        if not validation.is_valid or validation.source_type is None:
            raise FileValidationError(validation.error or "File validation failed")

        if not self._validator.validate_magic_bytes(upload.content, upload.mime_type):
            raise MagicBytesMismatchError("File content does not match declared type")

        if validation.source_type == SourceType.PDF_CLEAN:
            scan = self._validator.scan_pdf_for_threats(upload.content)
            if not scan.is_safe:
                raise PdfThreatError(scan.threats)

        sanitized = self._validator.sanitize_filename(upload.filename)
        source_path = conversion_source_key(upload.org_id, sanitized)
        self._blob_store.put(source_path, upload.content)

        conversion = Conversion(
            id=str(uuid.uuid4()),
            org_id=upload.org_id,
            created_by_id=upload.user_id,
            source_type=validation.source_type,
            source_path=source_path,
            mime_type=upload.mime_type,
            original_filename=upload.filename,
            status=ConversionStatus.PENDING,
            warnings=list(validation.warnings),
            expires_at=datetime.now(timezone.utc) + timedelta(days=self._ttl_days),
        )
        try:
            conversion = self._conversion_repo.create(conversion)
        except Exception:
            Log.error(f"Could not persist conversion for {source_path}, removing blob")
            self._blob_store.delete(source_path)
            raise

        Log.info(
            f"Conversion {conversion.id} created for org {upload.org_id} "
            f"({conversion.source_type.value}, {len(upload.content)} bytes)"
        )
        return ConversionResult(
            conversion_id=conversion.id,
            status=conversion.status,
            warnings=list(conversion.warnings),
        )

    def process_conversion(self, conversion_id: str) -> ConversionResult:
        """Run extraction and field detection for a PENDING conversion.

        Pipeline failures come back as a FAILED result rather than an exception.

        Raises:
            ConversionNotFoundError: if no conversion has this id.
            ConversionStateError: if the conversion is not PENDING.
        """
        conversion = self._conversion_repo.find_by_id(conversion_id)
        if conversion is None:
            raise ConversionNotFoundError(f"Conversion not found: {conversion_id}")
        if conversion.status != ConversionStatus.PENDING:
            raise ConversionStateError(
                f"Conversion is already {conversion.status.value.lower()}"
            )
        return self._processor.process(conversion)

    def create_form_from_conversion(
        self,
        conversion_id: str,
        user_id: str,
        options: CreateFormOptions | None = None,
    ) -> str:
        """Create a DRAFT form from reviewed fields and complete the conversion.

        Returns the new form id.

        Raises:
            ConversionNotFoundError: if no conversion has this id.
            ConversionStateError: if the conversion has not been through review.
            EmptyFieldSelectionError: if the selection leaves no fields.
            DuplicateFormError: if an active form with the same fingerprint exists.
        """
        options = options if options is not None else CreateFormOptions()
        conversion = self._conversion_repo.find_by_id(conversion_id)
        if conversion is None:
            raise ConversionNotFoundError(f"Conversion not found: {conversion_id}")
        if conversion.status not in _FORM_CREATION_STATUSES:
            raise ConversionStateError(
                f"Cannot create form from conversion with status: {conversion.status.value}"
            )

        fields = select_fields(conversion.detected_fields, options.selected_fields)
        if not fields:
            raise EmptyFieldSelectionError("No fields selected for form creation")

        fingerprint = generate_field_fingerprint(fields)
        form_id = self._form_repo.create(
            NewForm(
                org_id=conversion.org_id,
                created_by_id=user_id,
                name=options.name or DEFAULT_FORM_NAME,
                description=options.description,
                type=FormType.parse(options.type).value,
                field_fingerprint=fingerprint,
                fields=[_to_new_field(f, order) for order, f in enumerate(fields)],
            )
        )

        if not self._conversion_repo.mark_completed(conversion_id, form_id):
            Log.warning(
                f"Form {form_id} created but conversion {conversion_id} could not be completed"
            )
        Log.info(
            f"Form {form_id} created from conversion {conversion_id} "
            f"with {len(fields)} fields"
        )
        return form_id

    def get_conversion_status(self, conversion_id: str) -> ConversionStatusView | None:
        return self._conversion_repo.find_view(conversion_id)

    def list_conversions(
        self,
        org_id: str,
        status: ConversionStatus | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ConversionPage:
        return self._conversion_repo.list_for_org(org_id, status, limit=limit, offset=offset)

    def delete_conversion(self, conversion_id: str) -> None:
        """Remove the conversion record and then its source blob.

        Raises:
            ConversionNotFoundError: if no conversion has this id.
        """
        conversion = self._conversion_repo.find_by_id(conversion_id)
        if conversion is None:
            raise ConversionNotFoundError(f"Conversion not found: {conversion_id}")
        self._conversion_repo.delete(conversion_id)
        self._blob_store.delete(conversion.source_path)
        Log.info(f"Conversion {conversion_id} deleted")


def select_fields(
    fields: list[DetectedField], selected_slugs: list[str] | None
) -> list[DetectedField]:
    """Fields picked by slug, in the caller's order. None selects everything."""
    if selected_slugs is None:
        return list(fields)
    by_slug = {f.slug: f for f in fields}
    selected: list[DetectedField] = []
    seen: set[str] = set()
    for slug in selected_slugs:
        if slug in by_slug and slug not in seen:
            selected.append(by_slug[slug])
            seen.add(slug)
    return selected


def _to_new_field(detected: DetectedField, order: int) -> NewFormField:
    return NewFormField(
        slug=detected.slug,
        name=detected.name,
        type=detected.type.value,
        purpose=detected.purpose.value,
        purpose_note=detected.purpose_note,
        help_text=detected.help_text,
        is_required=detected.is_required,
        is_sensitive=detected.is_sensitive,
        options=detected.options,
        section=detected.section,
        order=order,
    )


def build_service(settings: Settings) -> ConversionService:
    """Build a ConversionService and its processor from settings."""
    blob_store = BlobStoreFactory.create(settings)
    conversion_repo = ConversionRepository()
    return ConversionService(
        validator=SecurityValidator(UploadPolicy.from_settings(settings)),
        blob_store=blob_store,
        conversion_repo=conversion_repo,
        form_repo=FormRepository(),
        feature_flags=FeatureFlagRepository(),
        processor=build_processor(settings, conversion_repo, blob_store),
        ttl_days=settings.conversion_ttl_days,
    )
