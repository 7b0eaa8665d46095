class ConversionError(Exception):
    """Base exception for conversion lifecycle errors."""


class ConversionNotFoundError(ConversionError):
    """Raised when a conversion id does not exist."""


class ConversionStateError(ConversionError):
    """Raised when an operation is not allowed in the conversion's current status."""


class FeatureDisabledError(ConversionError):
    """Raised when the organization does not have form conversion enabled."""


class FieldValidationError(ConversionError):
    """Raised when detected fields break schema invariants (duplicate slugs, empty labels)."""


class EmptyFieldSelectionError(ConversionError):
    """Raised when form creation would produce a form without fields."""


class DuplicateFormError(ConversionError):
    """Raised when the datastore already holds a form with the same fingerprint."""

    def __init__(self, fingerprint: str, existing_form_id: str | None = None) -> None:
        message = f"A form with fingerprint {fingerprint} already exists"
        if existing_form_id:
            message += f" ({existing_form_id})"
        super().__init__(message)
        self.fingerprint = fingerprint
        self.existing_form_id = existing_form_id
