import pytest

from formconvert.pdf.exceptions import PdfExtractionError
from formconvert.pdf.pdfplumber_adapter import PdfPlumberAdapter
from formconvert.pdf.pymupdf_adapter import PyMuPdfAdapter
from formconvert.pdf.renderer import PdfPageRenderer

ADAPTERS = [PdfPlumberAdapter, PyMuPdfAdapter]


@pytest.mark.parametrize("adapter_cls", ADAPTERS)
class TestPdfAdapters:
    def test_extract_returns_text_and_page_count(
        self, adapter_cls: type, sample_pdf_bytes: bytes
    ) -> None:
        result = adapter_cls().extract(sample_pdf_bytes)
        assert "Hello PDF World" in result.text
        assert result.page_count == 1

    def test_extract_multi_page(self, adapter_cls: type, multi_page_pdf_bytes: bytes) -> None:
        result = adapter_cls().extract(multi_page_pdf_bytes)
        assert "Page one content" in result.text
        assert "Page two content" in result.text
        assert result.page_count == 2

    def test_extract_empty_pdf_returns_empty_text(
        self, adapter_cls: type, empty_pdf_bytes: bytes
    ) -> None:
        result = adapter_cls().extract(empty_pdf_bytes)
        assert result.text == ""
        assert result.page_count == 1

    def test_invalid_bytes_raise(self, adapter_cls: type) -> None:
        with pytest.raises(PdfExtractionError):
            adapter_cls().extract(b"not a pdf at all")


class TestPdfPageRenderer:
    def test_renders_png_per_page(self, multi_page_pdf_bytes: bytes) -> None:
        pages = PdfPageRenderer(dpi=36).render(multi_page_pdf_bytes, max_pages=5)
        assert len(pages) == 2
        assert all(page.startswith(b"\x89PNG") for page in pages)

    def test_respects_page_cap(self, multi_page_pdf_bytes: bytes) -> None:
        pages = PdfPageRenderer(dpi=36).render(multi_page_pdf_bytes, max_pages=1)
        assert len(pages) == 1

    def test_invalid_bytes_raise(self) -> None:
        with pytest.raises(PdfExtractionError):
            PdfPageRenderer().render(b"garbage", max_pages=1)
