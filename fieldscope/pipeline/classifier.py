"""Field category classification and the string heuristics behind it.

classify_field is an ordered rule list; the first rule that matches decides.
The order matters: a field literally named "Total" is output even though
nothing marks it as an input.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Literal

from fieldscope.pipeline import keywords
from fieldscope.pipeline.extraction import ExtractedField

logger = logging.getLogger(__name__)

Category = Literal["entrada", "saida", "neutro"]

DERIVED_NOTE = "(identificado automaticamente como derivado)"


def _contains_any(text: str, terms: tuple[str, ...]) -> bool:
    return any(term in text for term in terms)


def _names_personal_data(name: str) -> bool:
    if _contains_any(name, keywords.PERSONAL_FIELD_KEYWORDS):
        return True
    if "data" in name and "atualização" not in name:
        return True
    return "date" in name and "update" not in name


def _names_system_data(name: str) -> bool:
    if _contains_any(name, keywords.SYSTEM_FIELD_KEYWORDS):
        return True
    if "número" in name and "pedido" in name:
        return True
    return "number" in name and "order" in name


# (category, predicate(lower_name, lower_value)) in evaluation order
CATEGORY_RULES: tuple[tuple[Category, Callable[[str, str], bool]], ...] = (
    ("entrada", lambda n, v: _contains_any(n, keywords.INPUT_CUES) or _contains_any(v, keywords.INPUT_CUES)),
    ("saida", lambda n, v: _contains_any(n, keywords.OUTPUT_CUES) or _contains_any(v, keywords.OUTPUT_CUES)),
    ("saida", lambda n, v: _contains_any(n, keywords.OUTPUT_NAME_KEYWORDS)),
    ("entrada", lambda n, v: _contains_any(n, keywords.INPUT_NAME_KEYWORDS) or n.endswith("?")),
    ("entrada", lambda n, v: _names_personal_data(n)),
    ("saida", lambda n, v: _names_system_data(n)),
)


def classify_field(name: str, value: str | None = "") -> Category:
    """Classify a field as entrada (input), saida (output) or neutro."""
    lower_name = name.lower()
    lower_value = (value or "").lower()
    for category, matches in CATEGORY_RULES:
        if matches(lower_name, lower_value):
            return category
    return "neutro"


# --- Name likelihood ---

_CAMEL_CASE = re.compile(r"^[a-z][a-zA-Z0-9]*([A-Z][a-zA-Z0-9]*)*$")
_SNAKE_CASE = re.compile(r"^[a-z][a-z0-9]*(_[a-z0-9]+)*$")

FIELD_NAME_RULES: tuple[tuple[str, Callable[[str], bool]], ...] = (
    (
        "common_field_name",
        lambda t: _contains_any(t.lower(), keywords.PT_FIELD_NAMES)
        or _contains_any(t.lower(), keywords.EN_FIELD_NAMES),
    ),
    ("field_phrase", lambda t: _contains_any(t.lower(), keywords.FIELD_NAME_PHRASES)),
    ("short_label_with_colon", lambda t: ":" in t and len(t) < 50),
    ("identifier_shape", lambda t: bool(_CAMEL_CASE.match(t) or _SNAKE_CASE.match(t))),
)


def is_field_name(text: str) -> bool:
    """True when the text looks like the name of a form field."""
    return any(rule(text) for _, rule in FIELD_NAME_RULES)


# --- Ignore list ---

_IGNORED_PATTERN = re.compile(
    "|".join(
        rf"(?<!\w){re.escape(term)}(?!\w)"
        for term in sorted(keywords.IGNORED_TERMS, key=len, reverse=True)
    )
)
_PAGINATION_PATTERN = re.compile(r"^(página|pagina|page)?\s*\d+\s*(de|of|/)\s*\d+$")


def is_ignored_term(text: str) -> bool:
    """True for UI noise: menu items, buttons, pagination, boilerplate."""
    lower_text = text.strip().lower()
    if _PAGINATION_PATTERN.match(lower_text):
        return True
    return bool(_IGNORED_PATTERN.search(lower_text))


# --- Derived fields ---


# Letters only on either side, so "net_amount" matches and "internet" does not
_DERIVED_WORD_PATTERN = re.compile(
    "|".join(rf"(?<![^\W\d_]){re.escape(word)}(?![^\W\d_])" for word in keywords.DERIVED_WHOLE_WORDS)
)


def is_derived_name(*names: str | None) -> bool:
    for name in names:
        if not name:
            continue
        lower_name = name.lower()
        if _contains_any(lower_name, keywords.DERIVED_KEYWORDS):
            return True
        if _DERIVED_WORD_PATTERN.search(lower_name):
            return True
    return False


def identify_derived_fields(
    fields: list[ExtractedField], labels: dict[str, str] | None = None
) -> list[ExtractedField]:
    """Reclassify calculated/aggregated fields as derivado.

    ``labels`` optionally maps field id to the raw label or identifier the
    field was extracted under, checked together with the display name.
    """
    labels = labels or {}
    result: list[ExtractedField] = []
    for field in fields:
        if not is_derived_name(field.name, labels.get(field.id)):
            result.append(field)
            continue
        logger.debug("Field %r reclassified as derivado", field.name)
        description = field.description or "Campo calculado/agregado"
        result.append(
            field.model_copy(
                update={
                    "field_category": "derivado",
                    "description": f"{description} {DERIVED_NOTE}",
                }
            )
        )
    return result
