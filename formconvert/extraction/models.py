from dataclasses import dataclass, field
from typing import Any, Literal

ElementType = Literal[
    "text_field", "checkbox", "radio", "dropdown", "signature", "date", "number"
]


@dataclass(frozen=True)
class BoundingBox:
    """Position of an element on a page, in page units."""

    x: float
    y: float
    width: float
    height: float
    page: int = 1

    def to_dict(self) -> dict[str, float | int]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "page": self.page,
        }

    @classmethod
    def from_dict(cls, raw: Any) -> "BoundingBox | None":
        if not isinstance(raw, dict):
            return None
        try:
            return cls(
                x=float(raw["x"]),
                y=float(raw["y"]),
                width=float(raw["width"]),
                height=float(raw["height"]),
                page=int(raw.get("page", 1)),
            )
        except (KeyError, TypeError, ValueError):
            return None


@dataclass(frozen=True)
class DetectedFormElement:
    """A form element found by OCR, before canonicalization."""

    type: ElementType
    label: str
    confidence: float
    value: str | None = None
    is_required: bool | None = None
    bounding_box: BoundingBox | None = None

    def to_hint(self) -> dict[str, object]:
        """Compact JSON-ready view used as a prompt hint."""
        hint: dict[str, object] = {
            "type": self.type,
            "label": self.label,
            "confidence": self.confidence,
        }
        if self.value is not None:
            hint["value"] = self.value
        if self.is_required is not None:
            hint["isRequired"] = self.is_required
        return hint


@dataclass(frozen=True)
class DocumentSection:
    content: str
    level: int = 1
    heading: str | None = None


@dataclass(frozen=True)
class DocumentTable:
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


@dataclass
class DocumentStructure:
    """Loose layout of a document: title, sections, tables, candidate fields."""

    title: str | None = None
    sections: list[DocumentSection] = field(default_factory=list)
    tables: list[DocumentTable] = field(default_factory=list)
    fields: list[DetectedFormElement] = field(default_factory=list)


@dataclass(frozen=True)
class OcrResult:
    """Output of the extraction step."""

    text: str
    page_count: int
    is_scanned: bool
    confidence: float
    structure: DocumentStructure = field(default_factory=DocumentStructure)

