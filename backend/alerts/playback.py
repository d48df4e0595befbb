"""Playback collaborator interface."""
from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ToneEmitter(Protocol):
    def emit_tone(self, frequency_hz: float, duration_ms: int) -> None:
        """Play one short cue. Fire-and-forget; no acknowledgment expected."""


class LoggingPlayback:
    """Emitter for headless deployments where the client renders the cue."""

    def emit_tone(self, frequency_hz: float, duration_ms: int) -> None:
        logger.debug("Cue %.1f Hz for %d ms", frequency_hz, duration_ms)
