from formconvert.ai.models import ImageInput
from formconvert.extraction.models import OcrResult
from formconvert.extraction.text_structure import parse_text_structure
from formconvert.extraction.vision import VisionExtractor, vision_media_type
from formconvert.logging.logger import Log
from formconvert.pdf.base import BasePdfExtractor
from formconvert.pdf.renderer import PdfPageRenderer
from formconvert.security.validator import SecurityValidator

NATIVE_TEXT_CONFIDENCE = 0.95


class DocumentExtractor:
    """Turns validated document bytes into text plus a loose structure.

    PDFs with a usable text layer are parsed locally; photos and image-only
    PDFs go through the vision model.
    """

    def __init__(
        self,
        *,
        pdf_extractor: BasePdfExtractor,
        renderer: PdfPageRenderer,
        vision: VisionExtractor,
        validator: SecurityValidator,
        max_vision_pages: int = 5,
    ) -> None:
        self._pdf_extractor = pdf_extractor
        self._renderer = renderer
        self._vision = vision
        self._validator = validator
        self._max_vision_pages = max_vision_pages

    def extract(self, content: bytes, mime_type: str) -> OcrResult:
        if mime_type == "application/pdf":
            return self.extract_from_pdf(content)
        return self.extract_from_image(content, mime_type)

    def extract_from_pdf(self, content: bytes) -> OcrResult:
        """Parse the native text layer, or hand off to vision when the PDF looks scanned."""
        pdf_text = self._pdf_extractor.extract(content)
        page_count = max(pdf_text.page_count, 1)

        if self._validator.is_pdf_scanned(pdf_text.text, page_count):
            Log.info(
                f"PDF has {len(pdf_text.text)} chars over {page_count} page(s), "
                "treating as scanned"
            )
            pages = self._renderer.render(content, self._max_vision_pages)
            if page_count > len(pages):
                Log.warning(
                    f"Only the first {len(pages)} of {page_count} pages sent to vision"
                )
            images = [ImageInput(data=page, media_type="image/png") for page in pages]
            return self.extract_with_vision(images, page_count)

        return OcrResult(
            text=pdf_text.text,
            page_count=page_count,
            is_scanned=False,
            confidence=NATIVE_TEXT_CONFIDENCE,
            structure=parse_text_structure(pdf_text.text),
        )

    def extract_from_image(self, content: bytes, mime_type: str) -> OcrResult:
        image = ImageInput(data=content, media_type=vision_media_type(mime_type))
        return self.extract_with_vision([image], page_count=1)

    def extract_with_vision(self, images: list[ImageInput], page_count: int) -> OcrResult:
        """Send page images to the vision model. Page order is preserved."""
        return self._vision.extract(images, page_count)
