"""Fingerprinting and set-similarity scoring for field lists. All functions are pure."""

from collections.abc import Iterable, Sequence
from typing import Protocol

from formconvert.duplicates.models import JaccardResult
from formconvert.fields.mapping import normalize_label


class NamedField(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def type(self) -> object: ...


def _type_name(value: object) -> str:
    return str(getattr(value, "value", value))


def generate_field_fingerprint(fields: Iterable[NamedField]) -> str:
    """Deterministic 8+ hex-digit key for a field set, independent of input order."""
    ordered = sorted(fields, key=lambda f: (f.name, _type_name(f.type)))
    components = [f"{normalize_label(f.name)}:{_type_name(f.type)}" for f in ordered]
    return hash_components(components)


def hash_components(components: Sequence[str]) -> str:
    """31-multiplier rolling hash over the joined components, kept to signed 32 bits."""
    value = 0
    for char in "|".join(components):
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return format(abs(value), "08x")


def calculate_jaccard_similarity(set_a: set[str], set_b: set[str]) -> JaccardResult:
    """|A ∩ B| / |A ∪ B|; two empty sets score 0."""
    intersection = sorted(set_a & set_b)
    union_size = len(set_a | set_b)
    similarity = len(intersection) / union_size if union_size else 0.0
    return JaccardResult(similarity=similarity, intersection=intersection)


def calculate_weighted_similarity(
    fields_a: Iterable[NamedField], fields_b: Iterable[NamedField]
) -> float:
    """Name+type matches score 1, name-only matches 0.5, over all distinct names."""
    types_a = {normalize_label(f.name): _type_name(f.type) for f in fields_a}
    types_b = {normalize_label(f.name): _type_name(f.type) for f in fields_b}

    score = 0.0
    for name, type_a in types_a.items():
        if name in types_b:
            score += 1.0 if types_b[name] == type_a else 0.5

    total = len(types_a.keys() | types_b.keys())
    return score / total if total else 0.0


def label_set(fields: Iterable[NamedField]) -> set[str]:
    return {normalize_label(f.name) for f in fields}
