from dataclasses import dataclass, field

from formconvert.config.settings import Settings

PHOTO_MIME_TYPES = ("image/jpeg", "image/png", "image/webp", "image/heic", "image/heif")
PDF_MIME_TYPES = ("application/pdf",)

EXTENSION_MIME_MAP: dict[str, tuple[str, ...]] = {
    ".jpg": ("image/jpeg",),
    ".jpeg": ("image/jpeg",),
    ".png": ("image/png",),
    ".webp": ("image/webp",),
    ".heic": ("image/heic",),
    ".heif": ("image/heif",),
    ".pdf": ("application/pdf",),
}

SUSPICIOUS_EXTENSIONS = (
    ".exe", ".dll", ".bat", ".cmd", ".ps1", ".vbs", ".js", ".sh", ".php", ".asp",
)


@dataclass(frozen=True)
class UploadPolicy:
    """Limits applied to uploads before they enter the pipeline."""

    max_photo_bytes: int = 10 * 1024 * 1024
    max_pdf_bytes: int = 25 * 1024 * 1024
    photo_mime_types: tuple[str, ...] = PHOTO_MIME_TYPES
    pdf_mime_types: tuple[str, ...] = PDF_MIME_TYPES
    extension_mime_map: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(EXTENSION_MIME_MAP)
    )
    suspicious_extensions: tuple[str, ...] = SUSPICIOUS_EXTENSIONS
    max_basename_length: int = 100
    scanned_chars_per_page: int = 100

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadPolicy":
        return cls(
            max_photo_bytes=settings.max_photo_bytes,
            max_pdf_bytes=settings.max_pdf_bytes,
        )
