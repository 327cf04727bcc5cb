"""Signal emitter: progress events for a single extraction.

Subscribers are notified in emission order. A failing subscriber is logged
and never interrupts the extraction.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable

from fieldscope.signals.types import Signal, SignalType
from fieldscope.telemetry.errors import ErrorCode, emit_structured_error

logger = logging.getLogger(__name__)


class SignalEmitter:
    """Emits and broadcasts signals for a single extraction.

    Signals are:
    - Immutable once emitted
    - Assigned monotonic sequence numbers
    - Kept in memory for the lifetime of the emitter
    - Broadcast to subscribers in real time
    """

    def __init__(self, extraction_id: str) -> None:
        self._extraction_id = extraction_id
        self._sequence = 0
        self._subscribers: list[Callable[[Signal], Any]] = []
        self._signals: list[Signal] = []
        self._lock = asyncio.Lock()

    @property
    def extraction_id(self) -> str:
        return self._extraction_id

    @property
    def signals(self) -> list[Signal]:
        """Return all emitted signals (read-only copy)."""
        return list(self._signals)

    def subscribe(self, callback: Callable[[Signal], Any]) -> None:
        """Register a subscriber. Sync callables and coroutine functions both work."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[Signal], Any]) -> None:
        """Remove the first subscriber equal to ``callback``.

        Bound methods compare equal, not identical, across attribute lookups.
        """
        for index, subscriber in enumerate(self._subscribers):
            if subscriber == callback:
                del self._subscribers[index]
                return

    async def emit(self, signal_type: SignalType, payload: dict[str, Any] | None = None) -> Signal:
        """Emit a signal. This is the ONLY way to create signals."""
        async with self._lock:
            self._sequence += 1
            signal = Signal(
                sequence=self._sequence,
                signal_type=signal_type,
                timestamp=datetime.now(timezone.utc),
                extraction_id=self._extraction_id,
                payload=payload or {},
            )
            self._signals.append(signal)

        await self._broadcast(signal)
        return signal

    async def _broadcast(self, signal: Signal) -> None:
        for subscriber in self._subscribers:
            try:
                result = subscriber(signal)
                if asyncio.iscoroutine(result):
                    await result
            except Exception as exc:
                emit_structured_error(
                    logger,
                    code=ErrorCode.SIGNAL_SUBSCRIBER_FAILURE,
                    message=str(exc),
                    suppressed=True,
                    extraction_id=self._extraction_id,
                    details={
                        "signal_type": signal.signal_type.value,
                        "sequence": signal.sequence,
                        "exception_type": type(exc).__name__,
                    },
                )

    async def emit_phase_transition(
        self, from_phase: str, to_phase: str, context: dict[str, Any] | None = None
    ) -> Signal:
        """Convenience: emit a PHASE_TRANSITION signal."""
        return await self.emit(
            SignalType.PHASE_TRANSITION,
            {"from_phase": from_phase, "to_phase": to_phase, **(context or {})},
        )

    async def emit_tier_outcome(
        self, tier: str, outcome: str, field_count: int = 0, reason: str | None = None
    ) -> Signal:
        """Convenience: emit TIER_SUCCEEDED, TIER_EMPTY or TIER_FAILED."""
        signal_type = {
            "success": SignalType.TIER_SUCCEEDED,
            "empty": SignalType.TIER_EMPTY,
            "failure": SignalType.TIER_FAILED,
        }[outcome]
        payload: dict[str, Any] = {"tier": tier, "field_count": field_count}
        if reason is not None:
            payload["reason"] = reason
        return await self.emit(signal_type, payload)

    async def emit_extraction_complete(
        self, total_fields: int, source_tier: str | None, total_duration_s: float
    ) -> Signal:
        """Convenience: emit EXTRACTION_COMPLETE."""
        return await self.emit(
            SignalType.EXTRACTION_COMPLETE,
            {
                "total_fields": total_fields,
                "source_tier": source_tier,
                "total_duration_s": total_duration_s,
            },
        )
