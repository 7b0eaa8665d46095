class FieldDetectionError(Exception):
    """Raised when the AI field proposal cannot be used."""
