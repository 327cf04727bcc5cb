"""Type and complexity resolution for extracted fields."""

from __future__ import annotations

import re

from fieldscope.pipeline.extraction import Complexity, FieldType

HTML_INPUT_TYPES: dict[str, FieldType] = {
    "text": "text",
    "password": "text",
    "email": "email",
    "tel": "text",
    "number": "number",
    "date": "date",
    "datetime-local": "date",
    "time": "text",
    "checkbox": "checkbox",
    "radio": "radio",
    "file": "file",
    "url": "url",
    "search": "text",
    "color": "text",
    "range": "number",
    "hidden": "text",
    # Internal types that have no <input type> of their own
    "select": "select",
    "textarea": "textarea",
}

# Ordered; the first group with a keyword contained in the name wins
NAME_TYPE_RULES: tuple[tuple[FieldType, tuple[str, ...]], ...] = (
    ("email", ("email",)),
    ("text", ("senha", "password")),
    ("date", ("data", "date", "nascimento")),
    ("number", ("número", "number", "quantidade", "quantity", "valor", "amount", "preço", "price")),
    (
        "textarea",
        (
            "descrição", "description", "observação", "observation",
            "comentário", "comment", "mensagem", "message",
        ),
    ),
    ("checkbox", ("aceito", "accept", "concordo", "agree", "lembrar", "remember")),
    ("radio", ("sexo", "gender", "opção", "option")),
    (
        "select",
        ("estado", "state", "país", "country", "categoria", "category", "tipo", "type", "status"),
    ),
    ("file", ("arquivo", "file", "anexo", "attachment", "upload")),
    ("url", ("url", "site", "website", "link")),
)

HIGH_COMPLEXITY_TYPES = frozenset({"file", "textarea"})
AVERAGE_COMPLEXITY_TYPES = frozenset({"date", "select", "email", "url", "number"})
HIGH_COMPLEXITY_NAME_KEYWORDS = ("cpf", "cnpj", "password", "senha", "completo", "complete")

_CAMEL_BOUNDARY = re.compile(r"([A-Z])")


def map_html_input_type(html_type: str) -> FieldType:
    return HTML_INPUT_TYPES.get(html_type.strip().lower(), "text")


def determine_field_type(explicit_type: str | None, name: str) -> FieldType:
    """Resolve a field type from an explicit hint, falling back to the name."""
    if explicit_type:
        return map_html_input_type(explicit_type)

    lower_name = name.lower()
    for field_type, keywords in NAME_TYPE_RULES:
        if any(keyword in lower_name for keyword in keywords):
            return field_type
    return "text"


def determine_complexity(field_type: str, name: str) -> Complexity:
    """Type-based rules first, then name-based rules."""
    if field_type in HIGH_COMPLEXITY_TYPES:
        return "High"
    if field_type in AVERAGE_COMPLEXITY_TYPES:
        return "Average"

    lower_name = name.lower()
    if any(keyword in lower_name for keyword in HIGH_COMPLEXITY_NAME_KEYWORDS):
        return "High"
    if len(lower_name) > 20 or " " in lower_name:
        return "Average"
    return "Low"


def format_field_name(name: str) -> str:
    """Turn an identifier like ``dataNascimento`` or ``data_nascimento`` into a label."""
    formatted = _CAMEL_BOUNDARY.sub(r" \1", name)
    formatted = formatted.replace("_", " ")
    formatted = formatted[:1].upper() + formatted[1:]
    return " ".join(formatted.split())
