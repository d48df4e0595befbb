"""Types for alert session lifecycle."""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from pydantic import BaseModel

from alerts.schedule import AlertSchedule
from proximity.types import Locked


class AlertTick(BaseModel):
    """One emitted cue, as seen by subscribers."""

    pin_id: str
    frequency_hz: float
    interval_ms: int
    duration_ms: int
    distance_m: float
    sequence: int


@dataclass
class AlertSession:
    """Handle for the repeating cue timer of one lock session."""

    pin_id: str
    distance_m: float
    schedule: AlertSchedule
    stop_event: threading.Event = field(default_factory=threading.Event)
    thread: threading.Thread | None = None
    started_at: float = field(default_factory=time.monotonic)
    tick_count: int = 0
    last_tick_at: float = 0.0

    @property
    def is_alive(self) -> bool:
        return self.thread is not None and self.thread.is_alive()

    @property
    def is_cancelled(self) -> bool:
        return self.stop_event.is_set()

    def matches(self, lock: Locked) -> bool:
        return self.pin_id == lock.pin_id and self.distance_m == lock.distance_m

    def cancel(self, timeout: float | None = None) -> bool:
        """Stop the timer and wait for an in-flight cue to finish.

        Returns False when the timer thread is still alive after ``timeout``.
        """
        self.stop_event.set()
        # A subscriber may re-enter the scheduler from the timer thread itself.
        if self.thread is None or self.thread is threading.current_thread():
            return True
        self.thread.join(timeout=timeout)
        return not self.thread.is_alive()

    def to_dict(self) -> dict:
        return {
            "pin_id": self.pin_id,
            "distance_m": self.distance_m,
            "interval_ms": self.schedule.interval_ms,
            "tone_frequency_hz": self.schedule.tone_frequency_hz,
            "status": "active" if self.is_alive and not self.is_cancelled else "stopped",
            "started_at_monotonic": self.started_at,
            "tick_count": self.tick_count,
            "last_tick_at_monotonic": self.last_tick_at,
        }
