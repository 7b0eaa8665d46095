from collections import Counter

from formconvert.fields.models import DetectedField, FieldValidationResult

LOW_CONFIDENCE_THRESHOLD = 0.6


def validate_detected_fields(fields: list[DetectedField]) -> FieldValidationResult:
    """Check a field list before it is stored.

    Errors (duplicate slugs, empty labels) fail the conversion; warnings
    (low confidence, sensitive data) are shown to the reviewer.
    """
    errors: list[str] = []
    warnings: list[str] = []

    slug_counts = Counter(f.slug for f in fields)
    duplicates = [slug for slug, count in slug_counts.items() if count > 1]
    if duplicates:
        errors.append(f"Duplicate field slugs: {', '.join(duplicates)}")

    empty_labels = [f for f in fields if not f.name.strip()]
    if empty_labels:
        errors.append(f"{len(empty_labels)} field(s) have empty labels")

    low_confidence = [f for f in fields if f.confidence < LOW_CONFIDENCE_THRESHOLD]
    if low_confidence:
        warnings.append(
            f"{len(low_confidence)} field(s) have low confidence: "
            f"{', '.join(f.name for f in low_confidence)}"
        )

    sensitive = [f for f in fields if f.is_sensitive]
    if sensitive:
        warnings.append(
            f"{len(sensitive)} field(s) may contain sensitive data: "
            f"{', '.join(f.name for f in sensitive)}"
        )

    return FieldValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
