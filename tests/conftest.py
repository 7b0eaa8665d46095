import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

INTAKE_FORM_LINES = [
    "CLIENT INTAKE FORM",
    "Client Name: ______________",
    "Date of Birth: ______________",
    "Phone Number: ______________",
    "Email: ______________",
    "Social Security Number: ______________",
    "SERVICES REQUESTED",
    "[x] Housing assistance",
    "[ ] Food pantry",
    "Client Signature: ______________",
]


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hello PDF World")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def intake_form_pdf_bytes() -> bytes:
    """Generate a one-page intake form with a real text layer."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    y = 720
    for line in INTAKE_FORM_LINES:
        c.drawString(72, y, line)
        y -= 24
    c.save()
    return buf.getvalue()
