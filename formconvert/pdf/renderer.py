import pymupdf

from formconvert.pdf.exceptions import PdfExtractionError


class PdfPageRenderer:
    """Rasterizes PDF pages to PNG so image-only PDFs can go through vision."""

    def __init__(self, dpi: int = 150) -> None:
        self._dpi = dpi

    def render(self, pdf_bytes: bytes, max_pages: int) -> list[bytes]:
        """Render up to max_pages pages, in order, as PNG bytes."""
        try:
            with pymupdf.open(stream=pdf_bytes, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                images: list[bytes] = []
                for index, page in enumerate(doc):
                    if index >= max_pages:
                        break
                    pixmap = page.get_pixmap(dpi=self._dpi)
                    images.append(pixmap.tobytes("png"))
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf rendering failed: {exc}") from exc
        if not images:
            raise PdfExtractionError("PDF has no pages to render")
        return images
