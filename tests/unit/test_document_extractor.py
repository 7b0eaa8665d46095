from unittest.mock import MagicMock

from formconvert.ai.models import ImageInput
from formconvert.extraction.extractor import DocumentExtractor
from formconvert.extraction.models import OcrResult
from formconvert.extraction.vision import VisionExtractor
from formconvert.pdf.base import BasePdfExtractor
from formconvert.pdf.models import PdfText
from formconvert.pdf.pdfplumber_adapter import PdfPlumberAdapter
from formconvert.pdf.renderer import PdfPageRenderer
from formconvert.security.validator import SecurityValidator

VISION_RESULT = OcrResult(text="from vision", page_count=1, is_scanned=True, confidence=0.9)


def _make_extractor(
    pdf_extractor: BasePdfExtractor | None = None,
) -> tuple[DocumentExtractor, MagicMock, MagicMock]:
    renderer = MagicMock(spec=PdfPageRenderer)
    renderer.render.return_value = [b"\x89PNG-page1", b"\x89PNG-page2"]
    vision = MagicMock(spec=VisionExtractor)
    vision.extract.return_value = VISION_RESULT
    extractor = DocumentExtractor(
        pdf_extractor=pdf_extractor if pdf_extractor is not None else PdfPlumberAdapter(),
        renderer=renderer,
        vision=vision,
        validator=SecurityValidator(),
        max_vision_pages=2,
    )
    return extractor, renderer, vision


class TestExtractFromPdf:
    def test_native_text_is_parsed_locally(self, intake_form_pdf_bytes: bytes) -> None:
        extractor, renderer, vision = _make_extractor()

        result = extractor.extract_from_pdf(intake_form_pdf_bytes)

        assert result.is_scanned is False
        assert result.confidence == 0.95
        assert result.page_count == 1
        labels = [f.label for f in result.structure.fields]
        assert "Client Name" in labels
        assert "Housing assistance" in labels
        renderer.render.assert_not_called()
        vision.extract.assert_not_called()

    def test_sparse_text_goes_to_vision(self, sample_pdf_bytes: bytes) -> None:
        extractor, renderer, vision = _make_extractor()

        result = extractor.extract_from_pdf(sample_pdf_bytes)

        assert result is VISION_RESULT
        renderer.render.assert_called_once_with(sample_pdf_bytes, 2)
        images, page_count = vision.extract.call_args.args
        assert page_count == 1
        assert [i.media_type for i in images] == ["image/png", "image/png"]

    def test_scanned_page_count_comes_from_pdf(self) -> None:
        pdf_extractor = MagicMock(spec=BasePdfExtractor)
        pdf_extractor.extract.return_value = PdfText(text="", page_count=7)
        extractor, _renderer, vision = _make_extractor(pdf_extractor)

        extractor.extract_from_pdf(b"%PDF-1.4")

        assert vision.extract.call_args.args[1] == 7


class TestExtractFromImage:
    def test_photo_goes_to_vision_as_single_page(self) -> None:
        extractor, _renderer, vision = _make_extractor()

        result = extractor.extract_from_image(b"\xff\xd8\xff", "image/jpeg")

        assert result is VISION_RESULT
        vision.extract.assert_called_once_with(
            [ImageInput(data=b"\xff\xd8\xff", media_type="image/jpeg")], page_count=1
        )

    def test_heic_is_sent_with_jpeg_label(self) -> None:
        extractor, _renderer, vision = _make_extractor()

        extractor.extract(b"\x00\x00\x00\x18ftypheic", "image/heic")

        image = vision.extract.call_args.args[0][0]
        assert image.media_type == "image/jpeg"
