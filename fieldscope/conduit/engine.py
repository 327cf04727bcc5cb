"""The Conduit: image field extraction lifecycle controller.

The Conduit is a finite state machine. It does not interpret images and
contains no AI logic. It drives the three extraction tiers in fallback
order with deterministic, forward-only phase transitions.

Responsibilities:
- Run AI_VISION, then OCR_REGEX, then RAW_OCR until one yields fields
- Convert every tier outcome into a TierResult at the tier boundary
- Deduplicate and drop UI noise from the winning tier's fields
- Emit Signals at every phase boundary and for every tier outcome

MUST NOT:
- Retry a tier or re-enter a phase
- Raise when no tier finds anything (the result is an empty list)
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Awaitable, Callable, Literal

import httpx

from fieldscope.conduit.phases import TERMINAL_PHASES, TIER_PHASES, VALID_TRANSITIONS, Phase
from fieldscope.config.settings import FieldscopeConfig
from fieldscope.pipeline.classifier import classify_field, identify_derived_fields
from fieldscope.pipeline.extraction import ExtractedField
from fieldscope.pipeline.manager import deduplicate_fields, filter_ignored
from fieldscope.pipeline.resolver import determine_complexity, determine_field_type
from fieldscope.pipeline.regex_service import CATEGORY_SUFFIX
from fieldscope.services.clients import (
    FieldExtractionClient,
    OCRClient,
    OCRResponse,
    VisionAIClient,
)
from fieldscope.signals.emitter import SignalEmitter
from fieldscope.signals.types import SignalType
from fieldscope.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)

AI_SOURCE = "Gemini AI"
OCR_SOURCE = "Google Cloud Vision"
DEFAULT_REGEX_SOURCE = "OCR+Regex"
VALID_CATEGORIES = frozenset({"entrada", "saida", "neutro", "derivado"})
# Assumed OCR confidence when the OCR service reports none
DEFAULT_OCR_CONFIDENCE = 0.8

TIER_ERROR_CODES = {
    Phase.AI_VISION: ErrorCode.VISION_AI_TIER_FAILED,
    Phase.OCR_REGEX: ErrorCode.OCR_REGEX_TIER_FAILED,
    Phase.RAW_OCR: ErrorCode.RAW_OCR_TIER_FAILED,
}


class ConduitError(Exception):
    """Raised when the Conduit is driven outside its state machine."""


@dataclass(frozen=True)
class TierResult:
    """Outcome of one extraction tier: success, empty or failure."""

    outcome: Literal["success", "empty", "failure"]
    fields: list[ExtractedField] = dataclass_field(default_factory=list)
    reason: str | None = None

    @classmethod
    def success(cls, fields: list[ExtractedField]) -> TierResult:
        return cls("success", list(fields))

    @classmethod
    def empty(cls) -> TierResult:
        return cls("empty")

    @classmethod
    def failure(cls, reason: str) -> TierResult:
        return cls("failure", reason=reason)

    @property
    def ok(self) -> bool:
        return self.outcome == "success" and bool(self.fields)


class ExtractionConduit:
    """Controller for one image extraction.

    A Conduit runs once: its phase only moves forward, so a second call to
    ``extract_from_image`` raises ConduitError. Create one per image.

    ``http`` may be shared across conduits; when omitted the conduit opens
    and closes its own client.
    """

    def __init__(
        self,
        config: FieldscopeConfig | None = None,
        http: httpx.AsyncClient | None = None,
        signals: SignalEmitter | None = None,
    ) -> None:
        self._config = config or FieldscopeConfig()
        self._extraction_id = f"ext_{uuid.uuid4().hex[:12]}"
        self._phase = Phase.INIT
        self._http = http
        self._signals = signals or SignalEmitter(extraction_id=self._extraction_id)
        self._ocr_cache: OCRResponse | None = None
        self._source_tier: Phase | None = None

    @property
    def extraction_id(self) -> str:
        return self._extraction_id

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def signals(self) -> SignalEmitter:
        return self._signals

    @property
    def source_tier(self) -> Phase | None:
        """The tier whose fields were returned, if any."""
        return self._source_tier

    # --- Phase Transition ---

    async def _transition(self, to_phase: Phase, context: dict[str, Any] | None = None) -> None:
        """Transition to a new phase with guard validation and signal emission.

        Every phase transition MUST go through this method.
        """
        if to_phase not in VALID_TRANSITIONS.get(self._phase, set()):
            raise ConduitError(f"Invalid transition: {self._phase.value} -> {to_phase.value}")

        from_phase = self._phase
        self._phase = to_phase

        await self._signals.emit_phase_transition(
            from_phase=from_phase.value,
            to_phase=to_phase.value,
            context=context or {},
        )

    # --- Main Run ---

    async def extract_from_image(self, image_base64: str) -> list[ExtractedField]:
        """Extract fields from a base64 screenshot through the tier chain.

        Returns an empty list when every tier comes back empty or failed.

        Raises:
            TypeError: if ``image_base64`` is not a string.
            ConduitError: if this conduit has already run.
        """
        if not isinstance(image_base64, str):
            raise TypeError(f"image_base64 must be str, got {type(image_base64).__name__}")
        if self._phase in TERMINAL_PHASES:
            raise ConduitError(
                f"Conduit {self._extraction_id} already finished in {self._phase.value}"
            )
        if self._phase != Phase.INIT:
            raise ConduitError(f"Conduit {self._extraction_id} is already running")

        start = time.monotonic()
        await self._signals.emit(
            SignalType.EXTRACTION_STARTED, {"image_size": len(image_base64)}
        )

        owns_http = self._http is None
        http = self._http or httpx.AsyncClient(timeout=self._config.timeouts.http_timeout_s)
        try:
            result = await self._run_tiers(http, image_base64)
        finally:
            if owns_http:
                await http.aclose()

        elapsed = round(time.monotonic() - start, 3)
        if not result.ok:
            await self._transition(Phase.EXHAUSTED)
            await self._signals.emit(
                SignalType.EXTRACTION_EXHAUSTED, {"total_duration_s": elapsed}
            )
            logger.info("Extraction %s found no fields", self._extraction_id)
            return []

        fields = await self._finalize(result.fields)
        await self._signals.emit_extraction_complete(
            total_fields=len(fields),
            source_tier=self._source_tier.value if self._source_tier else None,
            total_duration_s=elapsed,
        )
        logger.info(
            "Extraction %s complete: %d fields from %s",
            self._extraction_id,
            len(fields),
            self._source_tier.value if self._source_tier else "-",
        )
        return fields

    async def _run_tiers(self, http: httpx.AsyncClient, image_base64: str) -> TierResult:
        services = self._config.services
        timeouts = self._config.timeouts
        vision = VisionAIClient(http, services.vision_ai_url, timeout=timeouts.ai_timeout_s)
        ocr = OCRClient(http, services.ocr_url)
        extraction = FieldExtractionClient(http, services.field_extraction_url)

        tiers: dict[Phase, Callable[[], Awaitable[TierResult]]] = {
            Phase.AI_VISION: lambda: self._tier_ai_vision(vision, image_base64),
            Phase.OCR_REGEX: lambda: self._tier_ocr_regex(ocr, extraction, image_base64),
            Phase.RAW_OCR: lambda: self._tier_raw_ocr(ocr, image_base64),
        }

        result = TierResult.empty()
        for phase in TIER_PHASES:
            await self._transition(phase)
            result = await self._run_tier(phase, tiers[phase])
            if result.ok:
                self._source_tier = phase
                break
        return result

    async def _run_tier(
        self, phase: Phase, tier: Callable[[], Awaitable[TierResult]]
    ) -> TierResult:
        """Run one tier. Any exception becomes a failure result."""
        try:
            result = await tier()
        except Exception as exc:
            emit_structured_error(
                logger,
                code=TIER_ERROR_CODES[phase],
                message=str(exc),
                suppressed=True,
                extraction_id=self._extraction_id,
                phase=phase.value,
                details={"exception_type": type(exc).__name__},
            )
            result = TierResult.failure(str(exc))

        if result.outcome == "success" and not result.fields:
            result = TierResult.empty()

        await self._signals.emit_tier_outcome(
            tier=phase.value,
            outcome=result.outcome,
            field_count=len(result.fields),
            reason=result.reason,
        )
        return result

    async def _finalize(self, fields: list[ExtractedField]) -> list[ExtractedField]:
        """FINALIZE: deduplicate, then drop UI noise."""
        await self._transition(
            Phase.FINALIZE,
            {"source_tier": self._source_tier.value if self._source_tier else None},
        )
        unique = deduplicate_fields(fields)
        kept = filter_ignored(unique)
        await self._transition(
            Phase.COMPLETE,
            {"raw_count": len(fields), "deduplicated": len(unique), "kept": len(kept)},
        )
        return kept

    # --- Tiers ---

    async def _tier_ai_vision(self, client: VisionAIClient, image_base64: str) -> TierResult:
        """AI_VISION: ask the vision-AI service for the fields on screen."""
        items = await client.extract_fields(image_base64)
        confidence = self._config.extraction.ai_confidence

        fields: list[ExtractedField] = []
        labels: dict[str, str] = {}
        for item in items:
            name = item.label or item.name
            if not name:
                continue
            identifier = item.name or name
            field_type = determine_field_type(item.type, name)
            category = item.category if item.category in VALID_CATEGORIES else "neutro"
            record = ExtractedField(
                name=name,
                type=field_type,
                required=item.required,
                description=item.description,
                complexity=determine_complexity(field_type, identifier),
                source=AI_SOURCE,
                field_category=category,
                confidence=confidence,
            )
            labels[record.id] = identifier
            fields.append(record)

        if not fields:
            return TierResult.empty()
        return TierResult.success(identify_derived_fields(fields, labels))

    async def _recognize(self, client: OCRClient, image_base64: str) -> OCRResponse:
        if self._ocr_cache is None:
            self._ocr_cache = await client.recognize(image_base64)
        return self._ocr_cache

    async def _tier_ocr_regex(
        self, ocr: OCRClient, extraction: FieldExtractionClient, image_base64: str
    ) -> TierResult:
        """OCR_REGEX: OCR the image, then extract key/value fields from the text."""
        recognized = await self._recognize(ocr, image_base64)
        text = "\n".join(element.text for element in recognized.text_elements)
        if len(text.strip()) < self._config.extraction.min_ocr_text_length:
            logger.debug("OCR text too short for regex extraction (%d chars)", len(text.strip()))
            return TierResult.empty()

        response = await extraction.extract(text)
        if response.status != "success":
            return TierResult.failure(f"field extraction status {response.status!r}")

        fonte = response.fonte or DEFAULT_REGEX_SOURCE
        confidence = self._config.extraction.regex_confidence
        fields: list[ExtractedField] = []
        for key, value in response.campos.items():
            if key.endswith(CATEGORY_SUFFIX):
                continue
            value_text = "" if value is None else str(value)
            category = response.campos.get(key + CATEGORY_SUFFIX)
            if category not in VALID_CATEGORIES:
                category = classify_field(key, value_text)
            field_type = determine_field_type(None, key)
            fields.append(
                ExtractedField(
                    name=key,
                    type=field_type,
                    description=f"Campo extraído via {fonte} (valor: {value_text})",
                    complexity=determine_complexity(field_type, key),
                    source=fonte,
                    field_category=category,
                    confidence=confidence,
                )
            )

        if not fields:
            return TierResult.empty()
        return TierResult.success(fields)

    async def _tier_raw_ocr(self, ocr: OCRClient, image_base64: str) -> TierResult:
        """RAW_OCR: every OCR text element becomes a field."""
        recognized = await self._recognize(ocr, image_base64)
        fields: list[ExtractedField] = []
        for element in recognized.text_elements:
            name = element.text.strip()
            if not name:
                continue
            field_type = determine_field_type(None, name)
            confidence = element.confidence
            if confidence is None:
                confidence = DEFAULT_OCR_CONFIDENCE
            percent = round(confidence * 100)
            fields.append(
                ExtractedField(
                    name=name,
                    type=field_type,
                    description=f"Campo identificado por OCR com {percent}% de confiança",
                    complexity=determine_complexity(field_type, name),
                    source=OCR_SOURCE,
                    field_category=classify_field(name, ""),
                    confidence=element.confidence,
                    position=element.bounding_box,
                )
            )

        if not fields:
            return TierResult.empty()
        return TierResult.success(fields)
