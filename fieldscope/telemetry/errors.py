"""Structured error telemetry helpers."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Canonical error codes for operational telemetry."""

    VISION_AI_TIER_FAILED = "VISION_AI_TIER_FAILED"
    OCR_REGEX_TIER_FAILED = "OCR_REGEX_TIER_FAILED"
    RAW_OCR_TIER_FAILED = "RAW_OCR_TIER_FAILED"
    AI_INITIALIZATION_FAILED = "AI_INITIALIZATION_FAILED"
    AI_EXTRACTION_FAILED = "AI_EXTRACTION_FAILED"
    SIGNAL_SUBSCRIBER_FAILURE = "SIGNAL_SUBSCRIBER_FAILURE"


def emit_structured_error(
    logger: logging.Logger,
    *,
    code: ErrorCode,
    message: str,
    suppressed: bool,
    extraction_id: str | None = None,
    phase: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a structured telemetry event via logging."""
    logger.error(
        "fieldscope_error",
        extra={
            "error_code": code,
            "error_message": message,
            "suppressed": suppressed,
            "extraction_id": extraction_id,
            "phase": phase,
            "details": details or {},
        },
    )
