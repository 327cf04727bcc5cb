"""Function-point scoring: per-field weights and the IFPUG breakdown report."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from fieldscope.pipeline.extraction import ExtractedField, FunctionPointAnalysis

EI_TYPES = frozenset({"text", "email", "number", "date", "checkbox", "radio", "file", "url"})
EO_TYPES = frozenset({"textarea", "select"})

_EI_WEIGHTS = {"Low": 3, "Average": 4, "High": 6}
_EO_WEIGHTS = {"Low": 4, "Average": 5, "High": 7}
_FALLBACK_WEIGHT = 4

# Per-bucket weights as (low, average, high)
BUCKET_WEIGHTS: dict[str, tuple[int, int, int]] = {
    "EI": (3, 4, 6),
    "EO": (4, 5, 7),
    "EQ": (3, 4, 6),
    "ILF": (7, 10, 15),
    "EIF": (5, 7, 10),
}


def calculate_function_points(field_type: str, complexity: str) -> int:
    """Weight of a single field. Unknown complexities score as High."""
    if field_type in EI_TYPES:
        table = _EI_WEIGHTS
    elif field_type in EO_TYPES:
        table = _EO_WEIGHTS
    else:
        return _FALLBACK_WEIGHT
    return table.get(complexity, table["High"])


def bucket_for(field: ExtractedField) -> str:
    """IFPUG category of a field. ILF/EIF are never assigned at field level."""
    if field.field_category == "entrada" or field.type in EI_TYPES:
        return "EI"
    if field.field_category == "saida" or field.type == "textarea":
        return "EO"
    return "EQ"


def analyze_function_points(fields: Iterable[ExtractedField]) -> FunctionPointAnalysis:
    """Aggregate fields into the five-bucket breakdown.

    Raises:
        TypeError: if an item is not an ExtractedField.
    """
    from fieldscope.pipeline.extraction import ExtractedField, FunctionPointAnalysis

    field_list = list(fields)
    for field in field_list:
        if not isinstance(field, ExtractedField):
            raise TypeError(f"Expected ExtractedField, got {type(field).__name__}")

    analysis = FunctionPointAnalysis(fields=field_list)
    breakdown = analysis.detailed_breakdown

    for field in field_list:
        bucket = breakdown[bucket_for(field)]
        if field.complexity == "Low":
            bucket.low += 1
        elif field.complexity == "Average":
            bucket.average += 1
        else:
            bucket.high += 1
        bucket.total += 1

    for key, (low_w, avg_w, high_w) in BUCKET_WEIGHTS.items():
        bucket = breakdown[key]
        bucket.fp = bucket.low * low_w + bucket.average * avg_w + bucket.high * high_w

    analysis.total_fields = len(field_list)
    analysis.total_function_points = sum(b.fp for b in breakdown.values())
    return analysis
