"""Upload validation for form conversion.

Every check here runs on the raw upload before a conversion record or blob
exists. `scan_pdf_for_threats` is a byte-level blocklist over PDF name
tokens, not a PDF object-graph parser: it will flag markers inside
unreferenced objects and miss markers hidden in compressed object streams.
"""

import re
import secrets
import string
import time

from formconvert.conversion.models import SourceType
from formconvert.security.models import FileValidationResult, PdfThreatScan
from formconvert.security.policy import UploadPolicy

_BASE36 = string.digits + string.ascii_lowercase

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

# a PDF name token ends at whitespace, a delimiter or end of input
_NAME_END = r"(?=[\s/<>\[\]()%{}]|$)"

# (pattern, threat description); all must be absent for a PDF to pass
_PDF_THREAT_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(rf"/JavaScript{_NAME_END}|/JS{_NAME_END}", re.IGNORECASE),
        "PDF contains JavaScript",
    ),
    (re.compile(rf"/EmbeddedFiles?{_NAME_END}", re.IGNORECASE), "PDF contains embedded files"),
    (re.compile(rf"/Launch{_NAME_END}", re.IGNORECASE), "PDF contains launch actions"),
    (
        re.compile(rf"/SubmitForm{_NAME_END}", re.IGNORECASE),
        "PDF contains form submission actions",
    ),
]
_PDF_FILE_SPEC = re.compile(r"/F\s*\(", re.IGNORECASE)
_PDF_EMBEDDED_FILE_STREAM = re.compile(rf"/EF{_NAME_END}", re.IGNORECASE)
_SAFE_EXTENSION = re.compile(r"^\.[A-Za-z0-9]+$")


class SecurityValidator:
    """Validates upload metadata and content against an UploadPolicy."""

    def __init__(self, policy: UploadPolicy | None = None) -> None:
        self._policy = policy if policy is not None else UploadPolicy()

    @property
    def policy(self) -> UploadPolicy:
        return self._policy

    def validate_file(
        self, filename: str, mime_type: str, size_bytes: int
    ) -> FileValidationResult:
        """Check extension, MIME type, size and filename safety.

        An extension/MIME disagreement is only a warning; the magic-byte check
        decides whether the content really is what the MIME type claims.
        """
        warnings: list[str] = []

        extension = get_file_extension(filename).lower()
        if not extension:
            return FileValidationResult(
                is_valid=False,
                source_type=None,
                error="File must have an extension",
                warnings=warnings,
            )

        source_type = self._source_type_for(mime_type)
        if source_type is None:
            return FileValidationResult(
                is_valid=False,
                source_type=None,
                error=(
                    f"Unsupported file type: {mime_type}. "
                    "Allowed types: JPEG, PNG, WebP, HEIC, PDF"
                ),
                warnings=warnings,
            )

        allowed_mimes = self._policy.extension_mime_map.get(extension)
        if allowed_mimes and mime_type not in allowed_mimes:
            warnings.append(
                f"File extension {extension} does not match MIME type {mime_type}"
            )

        max_size = (
            self._policy.max_photo_bytes
            if source_type == SourceType.PHOTO
            else self._policy.max_pdf_bytes
        )
        if size_bytes > max_size:
            return FileValidationResult(
                is_valid=False,
                source_type=source_type,
                error=(
                    f"File too large: {format_file_size(size_bytes)}. "
                    f"Maximum: {format_file_size(max_size)}"
                ),
                warnings=warnings,
            )

        if self.has_suspicious_filename(filename):
            return FileValidationResult(
                is_valid=False,
                source_type=source_type,
                error="Filename contains suspicious characters",
                warnings=warnings,
            )

        return FileValidationResult(is_valid=True, source_type=source_type, warnings=warnings)

    def validate_magic_bytes(self, buffer: bytes, mime_type: str) -> bool:
        """Return True only if the leading bytes match the signature for mime_type."""
        head = buffer[:8]
        if mime_type == "image/jpeg":
            return head[:3] == b"\xff\xd8\xff"
        if mime_type == "image/png":
            return head[:4] == b"\x89PNG"
        if mime_type == "application/pdf":
            return head[:4] == b"%PDF"
        if mime_type == "image/webp":
            return head[:4] == b"RIFF"
        if mime_type in ("image/heic", "image/heif"):
            # bytes 0-3 are the box size
            return head[4:8] == b"ftyp"
        return False

    def sanitize_filename(self, filename: str) -> str:
        """Build a safe, collision-resistant storage name from a user filename."""
        extension = get_file_extension(filename)
        base = filename[: len(filename) - len(extension)]
        extension = re.sub(r"[^a-z0-9.]", "", extension.lower())

        sanitized = _UNSAFE_CHARS.sub("_", base)
        sanitized = re.sub(r"\.+", "_", sanitized)
        sanitized = re.sub(r"\s+", "_", sanitized)
        sanitized = re.sub(r"_+", "_", sanitized)
        sanitized = sanitized.strip()[: self._policy.max_basename_length]

        timestamp = _to_base36(int(time.time() * 1000))
        suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
        return f"{sanitized}_{timestamp}_{suffix}{extension}"

    def scan_pdf_for_threats(self, buffer: bytes) -> PdfThreatScan:
        """Look for active-content markers in the raw PDF bytes."""
        content = buffer.decode("latin-1")
        threats = [
            description
            for pattern, description in _PDF_THREAT_PATTERNS
            if pattern.search(content)
        ]
        if _PDF_FILE_SPEC.search(content) and _PDF_EMBEDDED_FILE_STREAM.search(content):
            threats.append("PDF may reference external files")
        return PdfThreatScan(is_safe=not threats, threats=threats)

    def is_pdf_scanned(self, text_content: str, page_count: int) -> bool:
        """Treat a PDF as image-only when it yields too little text per page."""
        if not text_content or not text_content.strip():
            return True
        avg_chars_per_page = len(text_content) / max(page_count, 1)
        return avg_chars_per_page < self._policy.scanned_chars_per_page

    def has_suspicious_filename(self, filename: str) -> bool:
        if "\0" in filename or ".." in filename:
            return True
        extension = get_file_extension(filename)
        if extension and not _SAFE_EXTENSION.match(extension):
            return True
        lowered = filename.lower()
        return any(lowered.endswith(ext) for ext in self._policy.suspicious_extensions)

    def _source_type_for(self, mime_type: str) -> SourceType | None:
        if mime_type in self._policy.photo_mime_types:
            return SourceType.PHOTO
        if mime_type in self._policy.pdf_mime_types:
            # refined to PDF_SCANNED during processing
            return SourceType.PDF_CLEAN
        return None


def get_file_extension(filename: str) -> str:
    """Return the extension including the dot; empty for dotfiles and bare names."""
    last_dot = filename.rfind(".")
    return filename[last_dot:] if last_dot > 0 else ""


def format_file_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / (1024 * 1024):.1f} MB"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))
