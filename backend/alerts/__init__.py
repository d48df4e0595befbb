"""Proximity alert package."""

from .playback import LoggingPlayback, ToneEmitter
from .schedule import AlertSchedule, interval_ms, schedule_for, tone_frequency_hz
from .scheduler import AlertScheduler
from .types import AlertSession, AlertTick

__all__ = [
    "AlertSchedule",
    "AlertScheduler",
    "AlertSession",
    "AlertTick",
    "LoggingPlayback",
    "ToneEmitter",
    "interval_ms",
    "schedule_for",
    "tone_frequency_hz",
]
