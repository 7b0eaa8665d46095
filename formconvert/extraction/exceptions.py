class ExtractionError(Exception):
    """Base exception for document extraction failures."""


class VisionExtractionError(ExtractionError):
    """Raised when the vision model cannot be used for a document."""
