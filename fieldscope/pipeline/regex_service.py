"""Local OCR+Regex field-extraction service.

Turns OCR text into a flat ``campos`` map of ``key -> value`` plus a
``key_categoria`` entry per key. This is the response shape the
orchestrator's OCR_REGEX tier consumes.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from fieldscope.pipeline.classifier import classify_field, is_ignored_term

logger = logging.getLogger(__name__)

CATEGORY_SUFFIX = "_categoria"
FONTE = "regex"

_KEY_VALUE_LINE = re.compile(r"^\s*([^:]{2,60}?)\s*:\s*(.+?)\s*$")


def extract_key_values(text: str) -> dict[str, Any]:
    """Extract ``key: value`` pairs from OCR text.

    The first occurrence of a key wins. Ignored UI terms are skipped.
    """
    campos: dict[str, str] = {}
    categorias = {"entrada": 0, "saida": 0, "neutro": 0}
    lines = text.split("\n")

    for line in lines:
        if not line.strip():
            continue
        match = _KEY_VALUE_LINE.match(line)
        if not match:
            continue
        key, value = match.group(1).strip(), match.group(2).strip()
        if len(key) < 2 or not value or key in campos or is_ignored_term(key):
            continue
        category = classify_field(key, value)
        campos[key] = value
        campos[key + CATEGORY_SUFFIX] = category
        categorias[category] += 1

    found = sum(categorias.values())
    logger.debug("Regex extraction: %d fields from %d lines", found, len(lines))
    return {
        "campos": campos,
        "estatisticas": {"total_linhas": len(lines), "campos_encontrados": found},
        "categorias": categorias,
    }


def build_service_response(text: str) -> dict[str, Any]:
    """Full field-extraction service payload for ``text``."""
    result = extract_key_values(text)
    return {
        "status": "success",
        "fonte": FONTE,
        "campos": result["campos"],
        "texto_completo": text,
        "estatisticas": {**result["estatisticas"], "categorias": result["categorias"]},
    }
