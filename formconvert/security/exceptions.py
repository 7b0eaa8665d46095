class SecurityValidationError(Exception):
    """Base exception for rejected uploads. Raised before anything is persisted."""


class FileValidationError(SecurityValidationError):
    """Raised when filename, MIME type or size rules reject an upload."""


class MagicBytesMismatchError(SecurityValidationError):
    """Raised when file content does not match its declared MIME type."""


class PdfThreatError(SecurityValidationError):
    """Raised when a PDF contains active content markers."""

    def __init__(self, threats: list[str]) -> None:
        super().__init__(f"PDF security check failed: {', '.join(threats)}")
        self.threats = threats
