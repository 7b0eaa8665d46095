from unittest.mock import MagicMock

import pytest

from formconvert.pdf.factory import PdfExtractorFactory
from formconvert.pdf.pdfplumber_adapter import PdfPlumberAdapter
from formconvert.pdf.pymupdf_adapter import PyMuPdfAdapter


class TestPdfExtractorFactory:
    def test_creates_pdfplumber_adapter(self) -> None:
        settings = MagicMock(pdf_engine="pdfplumber")
        assert isinstance(PdfExtractorFactory.create(settings), PdfPlumberAdapter)

    def test_creates_pymupdf_adapter(self) -> None:
        settings = MagicMock(pdf_engine="PyMuPDF")
        assert isinstance(PdfExtractorFactory.create(settings), PyMuPdfAdapter)

    def test_unknown_engine_raises(self) -> None:
        settings = MagicMock(pdf_engine="tesseract")
        with pytest.raises(ValueError, match="Unknown PDF engine"):
            PdfExtractorFactory.create(settings)
