from dataclasses import dataclass, field
from typing import Literal

MatchType = Literal["exact", "high", "medium", "low", "none"]


@dataclass(frozen=True)
class SimilarityThresholds:
    """Lower bounds for each match class, highest first."""

    exact: float = 0.95
    high: float = 0.8
    medium: float = 0.6
    low: float = 0.4


@dataclass(frozen=True)
class DuplicateCheckResult:
    has_duplicate: bool
    similarity: float
    match_type: MatchType
    duplicate_form_id: str | None = None
    duplicate_form_name: str | None = None


@dataclass(frozen=True)
class SimilarForm:
    form_id: str
    form_name: str
    similarity: float
    matching_fields: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class JaccardResult:
    similarity: float
    intersection: list[str] = field(default_factory=list)
