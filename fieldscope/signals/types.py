"""Signal type definitions for extraction progress events."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SignalType(str, Enum):
    """All signal types emitted during an image extraction."""

    EXTRACTION_STARTED = "EXTRACTION_STARTED"
    PHASE_TRANSITION = "PHASE_TRANSITION"
    TIER_SUCCEEDED = "TIER_SUCCEEDED"
    TIER_EMPTY = "TIER_EMPTY"
    TIER_FAILED = "TIER_FAILED"
    EXTRACTION_COMPLETE = "EXTRACTION_COMPLETE"
    EXTRACTION_EXHAUSTED = "EXTRACTION_EXHAUSTED"


class Signal(BaseModel):
    """An immutable progress event emitted during one extraction.

    Signals are append-only and cannot be modified after emission.
    """

    sequence: int = Field(description="Monotonic sequence number within the extraction")
    signal_type: SignalType
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    extraction_id: str
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}
