"""Conduit phase definitions: the finite state machine states and transitions."""

from __future__ import annotations

from enum import Enum


class Phase(str, Enum):
    """All valid Conduit phases. Each tier phase either succeeds and moves
    to FINALIZE or falls through to the next tier."""

    INIT = "INIT"
    AI_VISION = "AI_VISION"
    OCR_REGEX = "OCR_REGEX"
    RAW_OCR = "RAW_OCR"
    FINALIZE = "FINALIZE"
    COMPLETE = "COMPLETE"
    EXHAUSTED = "EXHAUSTED"


# Valid phase transitions. Forward only; no phase is ever re-entered.
VALID_TRANSITIONS: dict[Phase, set[Phase]] = {
    Phase.INIT: {Phase.AI_VISION},
    Phase.AI_VISION: {Phase.OCR_REGEX, Phase.FINALIZE},
    Phase.OCR_REGEX: {Phase.RAW_OCR, Phase.FINALIZE},
    Phase.RAW_OCR: {Phase.FINALIZE, Phase.EXHAUSTED},
    Phase.FINALIZE: {Phase.COMPLETE},
    Phase.COMPLETE: set(),  # terminal
    Phase.EXHAUSTED: set(),  # terminal
}

TERMINAL_PHASES = {Phase.COMPLETE, Phase.EXHAUSTED}

# Tier phases in fallback order
TIER_PHASES = (Phase.AI_VISION, Phase.OCR_REGEX, Phase.RAW_OCR)
