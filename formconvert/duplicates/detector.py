from formconvert.database.repositories.form_repository import FormRepository
from formconvert.duplicates.models import (
    DuplicateCheckResult,
    MatchType,
    SimilarForm,
    SimilarityThresholds,
)
from formconvert.duplicates.similarity import (
    calculate_jaccard_similarity,
    generate_field_fingerprint,
    label_set,
)
from formconvert.fields.models import DetectedField
from formconvert.logging.logger import Log

_MATCH_DESCRIPTIONS: dict[str, str] = {
    "exact": "This appears to be an exact duplicate of an existing form.",
    "high": "This is very similar to an existing form. Consider using the existing form instead.",
    "medium": "This has some similarities to an existing form. Review before creating.",
    "low": "This has minor similarities to existing forms.",
    "none": "No similar forms found.",
}


def get_match_type_description(match_type: str) -> str:
    return _MATCH_DESCRIPTIONS.get(match_type, _MATCH_DESCRIPTIONS["none"])


class DuplicateDetector:
    """Compares a candidate field list against an organization's existing forms."""

    def __init__(
        self,
        form_repo: FormRepository,
        thresholds: SimilarityThresholds | None = None,
        similar_forms_limit: int = 5,
    ) -> None:
        self._form_repo = form_repo
        self._thresholds = thresholds if thresholds is not None else SimilarityThresholds()
        self._similar_forms_limit = similar_forms_limit

    def check_for_duplicates(
        self, org_id: str, fields: list[DetectedField]
    ) -> DuplicateCheckResult:
        """Exact fingerprint match first, then the best Jaccard match over label sets.

        Only exact and high matches count as duplicates; medium and low are
        reported so the reviewer can decide.
        """
        fingerprint = generate_field_fingerprint(fields)
        exact = self._form_repo.find_by_fingerprint(org_id, fingerprint)
        if exact is not None:
            Log.info(f"Fingerprint {fingerprint} matches form {exact.id}")
            return DuplicateCheckResult(
                has_duplicate=True,
                duplicate_form_id=exact.id,
                duplicate_form_name=exact.name,
                similarity=1.0,
                match_type="exact",
            )

        similar = self.find_similar_forms(org_id, fields)
        if not similar:
            return DuplicateCheckResult(has_duplicate=False, similarity=0.0, match_type="none")

        best = similar[0]
        match_type = self.classify(best.similarity)
        return DuplicateCheckResult(
            has_duplicate=match_type in ("exact", "high"),
            duplicate_form_id=best.form_id,
            duplicate_form_name=best.form_name,
            similarity=best.similarity,
            match_type=match_type,
        )

    def find_similar_forms(
        self, org_id: str, fields: list[DetectedField], limit: int | None = None
    ) -> list[SimilarForm]:
        """Non-archived forms scoring at least the low threshold, best first."""
        candidate_labels = label_set(fields)
        scored: list[SimilarForm] = []
        for form in self._form_repo.list_with_fields(org_id):
            result = calculate_jaccard_similarity(candidate_labels, label_set(form.fields))
            if result.similarity >= self._thresholds.low:
                scored.append(
                    SimilarForm(
                        form_id=form.id,
                        form_name=form.name,
                        similarity=result.similarity,
                        matching_fields=result.intersection,
                    )
                )
        scored.sort(key=lambda s: s.similarity, reverse=True)
        return scored[: limit if limit is not None else self._similar_forms_limit]

    def classify(self, similarity: float) -> MatchType:
        if similarity >= self._thresholds.exact:
            return "exact"
        if similarity >= self._thresholds.high:
            return "high"
        if similarity >= self._thresholds.medium:
            return "medium"
        if similarity >= self._thresholds.low:
            return "low"
        return "none"

    def update_form_fingerprint(self, form_id: str) -> str | None:
        """Recompute a stored form's fingerprint from its current field rows."""
        form = self._form_repo.find_by_id(form_id)
        if form is None:
            return None
        fingerprint = generate_field_fingerprint(form.fields)
        self._form_repo.update_fingerprint(form_id, fingerprint)
        return fingerprint
