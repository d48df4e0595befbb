"""Pure cadence and pitch derivation for the proximity alert."""
from __future__ import annotations

from dataclasses import dataclass

from common.config import (
    BASE_TONE_HZ,
    INTERVAL_MS_PER_METER,
    MAX_INTERVAL_MS,
    MIN_INTERVAL_MS,
    MIN_TONE_HZ,
    TONE_HZ_PER_METER,
)


@dataclass(frozen=True)
class AlertSchedule:
    interval_ms: int
    tone_frequency_hz: float

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000.0


def interval_ms(distance_m: float) -> int:
    """Closer target, faster cadence: 10 m -> 1000 ms, 2 m -> 200 ms."""
    raw = round(distance_m * INTERVAL_MS_PER_METER)
    return int(max(MIN_INTERVAL_MS, min(MAX_INTERVAL_MS, raw)))


def tone_frequency_hz(distance_m: float) -> float:
    """Closer target, higher pitch, never below an audible 440 Hz."""
    return max(MIN_TONE_HZ, BASE_TONE_HZ - distance_m * TONE_HZ_PER_METER)


def schedule_for(distance_m: float) -> AlertSchedule:
    return AlertSchedule(
        interval_ms=interval_ms(distance_m),
        tone_frequency_hz=tone_frequency_hz(distance_m),
    )
