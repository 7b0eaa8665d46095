from dataclasses import dataclass


@dataclass(frozen=True)
class PdfText:
    """Native text layer of a PDF."""

    text: str
    page_count: int
