"""Heuristic field miners: JSON, HTML and free-text extraction strategies.

Each miner is a pure function of the raw input string and returns its own
candidate list. No AI, no I/O. The manager concatenates their outputs.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field as dataclass_field
from typing import Any

from fieldscope.pipeline import keywords
from fieldscope.pipeline.classifier import classify_field, is_field_name, is_ignored_term
from fieldscope.pipeline.extraction import ExtractedField
from fieldscope.pipeline.resolver import (
    determine_complexity,
    determine_field_type,
    format_field_name,
    map_html_input_type,
)

logger = logging.getLogger(__name__)

RESERVED_JSON_KEYS = frozenset({"id", "key"})
FIELD_DEFINITION_KEYS = ("type", "label", "name")


def parse_json_input(raw: str) -> Any | None:
    """Parse raw input as JSON when it looks like JSON, else return None."""
    stripped = raw.strip()
    if not stripped.startswith(("{", "[")):
        return None
    try:
        return json.loads(stripped)
    except ValueError:
        logger.debug("Input starts like JSON but does not parse; skipping JSON miner")
        return None


# --- JSON ---


def _is_field_definition(value: Any) -> bool:
    return isinstance(value, dict) and any(value.get(k) for k in FIELD_DEFINITION_KEYS)


def _field_from_definition(definition: dict[str, Any], key: str, source: str) -> ExtractedField:
    name = str(definition.get("label") or definition.get("name") or key)
    identifier = str(definition.get("name") or key)
    type_hint = definition.get("type")
    field_type = determine_field_type(type_hint if isinstance(type_hint, str) else None, name)
    context = definition.get("description") or definition.get("placeholder") or ""
    return ExtractedField(
        name=name,
        type=field_type,
        required=bool(definition.get("required")),
        description=str(context) if context else f"Campo {name}",
        complexity=determine_complexity(field_type, identifier),
        source=source,
        field_category=classify_field(name, str(context)),
    )


def _walk_json(node: Any, results: list[ExtractedField]) -> None:
    if isinstance(node, dict):
        entries = [(str(k), v) for k, v in node.items()]
    elif isinstance(node, list):
        entries = [(str(i), v) for i, v in enumerate(node)]
    else:
        return

    for key, value in entries:
        if key.startswith("_") or key in RESERVED_JSON_KEYS:
            continue

        if isinstance(value, dict):
            if _is_field_definition(value):
                results.append(_field_from_definition(value, key, "JSON"))
            else:
                _walk_json(value, results)
        elif isinstance(value, list):
            if value and _is_field_definition(value[0]):
                for item in value:
                    if isinstance(item, dict):
                        results.append(_field_from_definition(item, key, "JSON Array"))
            else:
                for item in value:
                    _walk_json(item, results)
        elif isinstance(value, str) and is_field_name(key):
            field_type = determine_field_type(None, key)
            results.append(
                ExtractedField(
                    name=format_field_name(key),
                    type=field_type,
                    complexity=determine_complexity(field_type, key),
                    source="JSON Property",
                    field_category=classify_field(key, value),
                )
            )


def mine_json(raw: str) -> list[ExtractedField]:
    """Extract field definitions from a JSON document."""
    data = parse_json_input(raw)
    if data is None:
        return []
    results: list[ExtractedField] = []
    _walk_json(data, results)
    return results


# --- HTML ---

_INPUT_TAG = re.compile(r"<input\b[^>]*>", re.IGNORECASE)
_SELECT_BLOCK = re.compile(r"<select\b([^>]*)>([\s\S]*?)</select>", re.IGNORECASE)
_TEXTAREA_BLOCK = re.compile(r"<textarea\b([^>]*)>[\s\S]*?</textarea>", re.IGNORECASE)
_LABEL_BLOCK = re.compile(r"<label\b([^>]*)>([\s\S]*?)</label>", re.IGNORECASE)
_OPTION_TAG = re.compile(r"<option\b[^>]*>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")
_QUOTED = re.compile(r"\"[^\"]*\"|'[^']*'")
_REQUIRED_ATTR = re.compile(r"\brequired\b", re.IGNORECASE)

NON_FIELD_INPUT_TYPES = frozenset({"submit", "button", "reset", "image"})


def _attr(tag: str, name: str) -> str | None:
    match = re.search(rf"(?<![\w-]){name}\s*=\s*[\"']([^\"']*)[\"']", tag, re.IGNORECASE)
    return match.group(1).strip() if match else None


def _has_required_attr(tag: str) -> bool:
    return bool(_REQUIRED_ATTR.search(_QUOTED.sub("", tag)))


def _inner_text(markup: str) -> str:
    return " ".join(_ANY_TAG.sub(" ", markup).split())


@dataclass
class _HtmlCandidate:
    """A mined element plus the identifiers a <label for> may refer to."""

    record: ExtractedField
    identifiers: set[str] = dataclass_field(default_factory=set)


def _identifiers(tag: str) -> tuple[str | None, set[str]]:
    name_attr = _attr(tag, "name")
    id_attr = _attr(tag, "id")
    identifiers = {v.lower() for v in (name_attr, id_attr) if v}
    return name_attr or id_attr, identifiers


def _collect_html_elements(html: str) -> list[_HtmlCandidate]:
    candidates: list[_HtmlCandidate] = []

    for match in _INPUT_TAG.finditer(html):
        tag = match.group(0)
        html_type = _attr(tag, "type") or "text"
        if html_type.lower() in NON_FIELD_INPUT_TYPES:
            continue
        identifier, identifiers = _identifiers(tag)
        identifier = identifier or f"campo_{len(candidates) + 1}"
        placeholder = _attr(tag, "placeholder") or ""
        field_type = map_html_input_type(html_type)
        candidates.append(
            _HtmlCandidate(
                ExtractedField(
                    name=format_field_name(identifier),
                    type=field_type,
                    required=_has_required_attr(tag),
                    description=placeholder,
                    complexity=determine_complexity(field_type, identifier),
                    source="HTML",
                    field_category=classify_field(identifier, placeholder),
                ),
                identifiers,
            )
        )

    for match in _SELECT_BLOCK.finditer(html):
        opening, body = match.group(1), match.group(2)
        identifier, identifiers = _identifiers(opening)
        identifier = identifier or f"select_{len(candidates) + 1}"
        option_count = len(_OPTION_TAG.findall(body))
        if option_count > 10:
            complexity = "High"
        elif option_count > 5:
            complexity = "Average"
        else:
            complexity = "Low"
        candidates.append(
            _HtmlCandidate(
                ExtractedField(
                    name=format_field_name(identifier),
                    type="select",
                    required=_has_required_attr(opening),
                    description=f"Select com {option_count} opções",
                    complexity=complexity,
                    source="HTML",
                    field_category=classify_field(identifier, ""),
                ),
                identifiers,
            )
        )

    for match in _TEXTAREA_BLOCK.finditer(html):
        opening = match.group(1)
        identifier, identifiers = _identifiers(opening)
        identifier = identifier or f"textarea_{len(candidates) + 1}"
        placeholder = _attr(opening, "placeholder") or ""
        candidates.append(
            _HtmlCandidate(
                ExtractedField(
                    name=format_field_name(identifier),
                    type="textarea",
                    required=_has_required_attr(opening),
                    description=placeholder,
                    complexity="High",
                    source="HTML",
                    field_category=classify_field(identifier, placeholder),
                ),
                identifiers,
            )
        )

    return candidates


def _apply_labels(html: str, candidates: list[_HtmlCandidate]) -> list[ExtractedField]:
    standalone: list[ExtractedField] = []

    for match in _LABEL_BLOCK.finditer(html):
        attrs, body = match.group(1), match.group(2)
        text = _inner_text(body)
        label_required = "*" in text
        text = text.rstrip(" *:").strip()
        if not text:
            continue

        target = _attr(attrs, "for")
        if target:
            target_lower = target.lower()
            for candidate in candidates:
                if (
                    target_lower in candidate.identifiers
                    or candidate.record.name.lower() == target_lower
                ):
                    current = candidate.record
                    candidate.record = current.model_copy(
                        update={
                            "name": text,
                            "required": current.required or label_required,
                            "field_category": classify_field(text, current.description or ""),
                        }
                    )
                    break
        elif is_field_name(text):
            field_type = determine_field_type(None, text)
            standalone.append(
                ExtractedField(
                    name=text,
                    type=field_type,
                    required=label_required,
                    complexity=determine_complexity(field_type, text),
                    source="HTML Label",
                    field_category=classify_field(text, ""),
                )
            )

    return [c.record for c in candidates] + standalone


def mine_html(raw: str) -> list[ExtractedField]:
    """Extract form controls and labels from an HTML fragment.

    Two passes: controls are collected first, then <label for> overrides
    rename the control they point to.
    """
    if "<" not in raw:
        return []
    return _apply_labels(raw, _collect_html_elements(raw))


# --- Free text ---

_INDICATOR_PREFIX = re.compile(r"^(campo|field|input|label|rotulo)[\s:]+", re.IGNORECASE)
_REQUIRED_WORDS = re.compile(
    "|".join(re.escape(m) for m in keywords.REQUIRED_MARKERS if m != "*"), re.IGNORECASE
)
_EMPTY_PARENS = re.compile(r"\(\s*\)")
_KEY_VALUE = re.compile(r"^([^:]+):\s*(.+)$")


def _clean_text_line(line: str) -> str:
    return " ".join(_ANY_TAG.sub(" ", line).split())


def _field_from_line(line: str) -> ExtractedField | None:
    lower_line = line.lower()
    has_indicator = any(ind in lower_line for ind in keywords.FIELD_INDICATORS)
    if not (has_indicator or is_field_name(line)):
        return None

    name = _INDICATOR_PREFIX.sub("", line)
    required = "*" in name or bool(_REQUIRED_WORDS.search(name))
    name = _REQUIRED_WORDS.sub("", name.replace("*", ""))
    name = _EMPTY_PARENS.sub("", name)
    name = " ".join(name.split()).rstrip(" :*-").strip()
    if not name:
        return None

    field_type = determine_field_type(None, name)
    return ExtractedField(
        name=name,
        type=field_type,
        required=required,
        complexity=determine_complexity(field_type, name),
        source="Text",
        field_category=classify_field(name, ""),
    )


def _field_from_key_value(line: str) -> ExtractedField | None:
    match = _KEY_VALUE.match(line)
    if not match:
        return None
    key, value = match.group(1).strip(), match.group(2).strip()
    if not is_field_name(key) or is_ignored_term(key):
        return None

    name = key.rstrip(" *").strip() or key
    field_type = determine_field_type(None, name)
    return ExtractedField(
        name=name,
        type=field_type,
        required="*" in key,
        description=value,
        complexity=determine_complexity(field_type, name),
        source="Text KeyValue",
        field_category=classify_field(name, value),
    )


def mine_text(raw: str) -> list[ExtractedField]:
    """Extract field names line by line from free text."""
    results: list[ExtractedField] = []
    for raw_line in raw.split("\n"):
        line = _clean_text_line(raw_line)
        if len(line) < 3:
            continue
        for candidate in (_field_from_line(line), _field_from_key_value(line)):
            if candidate is not None:
                results.append(candidate)
    return results
