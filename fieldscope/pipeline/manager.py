"""Structured-input pipeline: miners, deduplication, classification, scoring.

Stages:
1. Pre-process: drop embedded IMAGE_DATA lines
2. Mine: JSON, HTML and text miners each produce their own candidate list
3. Deduplicate: case-insensitive name, first occurrence wins
4. Decorate: category reclassified from the final name and description

Scoring needs no stage of its own: fpValue is derived from (type, complexity).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from fieldscope.pipeline.classifier import classify_field, is_ignored_term
from fieldscope.pipeline.extraction import ExtractedField, FunctionPointAnalysis
from fieldscope.pipeline.heuristic import mine_html, mine_json, mine_text, parse_json_input
from fieldscope.pipeline.scoring import analyze_function_points

logger = logging.getLogger(__name__)

IMAGE_DATA_PREFIX = "IMAGE_DATA:"
PASSTHROUGH_KEYS = ("id", "name", "type")
# Provenance given to passed-through records that carry none
PASSTHROUGH_SOURCE = "JSON"


def deduplicate_fields(fields: Iterable[ExtractedField]) -> list[ExtractedField]:
    """Keep the first field for each case-insensitive name, in input order."""
    seen: set[str] = set()
    unique: list[ExtractedField] = []
    for field in fields:
        key = field.name.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(field)
    return unique


def filter_ignored(fields: Iterable[ExtractedField]) -> list[ExtractedField]:
    """Drop UI noise (menus, buttons, pagination). OCR/AI output only."""
    return [f for f in fields if not is_ignored_term(f.name)]


def _strip_image_data(raw: str) -> str:
    if IMAGE_DATA_PREFIX not in raw:
        return raw
    lines = [line for line in raw.split("\n") if not line.startswith(IMAGE_DATA_PREFIX)]
    return "\n".join(lines)


def _as_extracted_records(data: Any) -> list[ExtractedField] | None:
    """Return previously extracted field records unchanged, or None.

    Records without a ``source`` are tagged as JSON.
    """
    if not isinstance(data, list) or not data:
        return None
    first = data[0]
    if not isinstance(first, dict) or not all(first.get(k) for k in PASSTHROUGH_KEYS):
        return None
    return [
        ExtractedField.model_validate(
            {"source": PASSTHROUGH_SOURCE, **item} if isinstance(item, dict) else item
        )
        for item in data
    ]


def _decorate(field: ExtractedField) -> ExtractedField:
    category = classify_field(field.name, field.description or "")
    if category == field.field_category:
        return field
    return field.model_copy(update={"field_category": category})


def extract_from_structured_input(raw: str) -> list[ExtractedField]:
    """Extract, deduplicate, classify and score fields from text, HTML or JSON.

    Never raises for input that yields nothing; returns an empty list.

    Raises:
        TypeError: if ``raw`` is not a string.
        ValidationError: if ``raw`` is a list of field records and one of them
            is invalid, e.g. carries an fpValue that contradicts its type and
            complexity.
    """
    if not isinstance(raw, str):
        raise TypeError(f"raw must be str, got {type(raw).__name__}")
    if not raw.strip():
        return []

    data = _strip_image_data(raw)
    parsed = parse_json_input(data)

    records = _as_extracted_records(parsed)
    if records is not None:
        logger.debug("Input is a list of %d extracted fields; returning as-is", len(records))
        return records

    candidates = mine_json(data) + mine_html(data)
    if parsed is None:
        candidates += mine_text(data)

    unique = deduplicate_fields(candidates)
    fields = [_decorate(f) for f in unique]
    logger.debug(
        "Structured extraction: %d candidates, %d after dedup", len(candidates), len(fields)
    )
    return fields


def analyze(fields: Iterable[ExtractedField]) -> FunctionPointAnalysis:
    """Aggregate a field list into a function-point report. No I/O."""
    return analyze_function_points(fields)
