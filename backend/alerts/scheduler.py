"""Adaptive alert scheduler: one repeating cue timer per lock session."""
from __future__ import annotations

import itertools
import logging
import threading
import time
from typing import Callable

from alerts.playback import ToneEmitter
from alerts.schedule import schedule_for
from alerts.types import AlertSession, AlertTick
from common.config import CUE_DURATION_MS, alert_config
from proximity.types import Locked, LockState

logger = logging.getLogger(__name__)

AlertCallback = Callable[[AlertTick], None]


class AlertScheduler:
    """
    Drives the sonar cue while a pin is locked.

    Idle -> Active on lock, Active -> Active (re-armed) when the locked
    distance changes, Active -> Idle on unlock or target change. The previous
    session is always cancelled before a new one is armed, and every cue is
    emitted under one lock that re-checks cancellation, so a session whose
    thread outlives the join timeout can never sound again.
    """

    def __init__(
        self,
        playback: ToneEmitter | None = None,
        cue_duration_ms: int = CUE_DURATION_MS,
        join_timeout_seconds: float = alert_config.session_join_timeout_sec,
    ):
        self._playback = playback
        self._cue_duration_ms = cue_duration_ms
        self._join_timeout_seconds = join_timeout_seconds
        self._session: AlertSession | None = None
        self._lock = threading.Lock()
        self._subscribers: dict[int, AlertCallback] = {}
        self._subscribers_lock = threading.Lock()
        # One cue at a time across sessions; a timed-out join cannot overlap the next session.
        self._emit_lock = threading.Lock()
        self._tokens = itertools.count()
        self._closed = False

    @property
    def session(self) -> AlertSession | None:
        with self._lock:
            return self._session

    @property
    def is_active(self) -> bool:
        session = self.session
        return session is not None and session.is_alive

    def update(self, lock: LockState) -> AlertSession | None:
        with self._lock:
            current = self._session
            if isinstance(lock, Locked) and current is not None and current.matches(lock):
                return current

            if current is not None:
                self._session = None
                self._cancel(current)
                if not isinstance(lock, Locked):
                    logger.info("Lock on pin '%s' released", current.pin_id)
                elif lock.pin_id != current.pin_id:
                    logger.info("Lock moved from pin '%s' to '%s'", current.pin_id, lock.pin_id)

            if not isinstance(lock, Locked) or self._closed:
                return None

            self._session = self._arm(lock)
            return self._session

    def subscribe(self, callback: AlertCallback) -> Callable[[], None]:
        token = next(self._tokens)
        with self._subscribers_lock:
            self._subscribers[token] = callback

        def _unsubscribe():
            with self._subscribers_lock:
                self._subscribers.pop(token, None)

        return _unsubscribe

    def shutdown(self):
        with self._lock:
            self._closed = True
            session = self._session
            self._session = None
            if session is not None:
                self._cancel(session)
        logger.info("Alert scheduler shutdown complete")

    def _arm(self, lock: Locked) -> AlertSession:
        session = AlertSession(
            pin_id=lock.pin_id,
            distance_m=lock.distance_m,
            schedule=schedule_for(lock.distance_m),
        )
        session.thread = threading.Thread(
            target=self._run_session,
            args=(session,),
            name=f"alert-{lock.pin_id}",
            daemon=True,
        )
        session.thread.start()
        logger.info(
            "Armed alert for pin '%s' at %.1fm (every %dms, %.0f Hz)",
            session.pin_id,
            session.distance_m,
            session.schedule.interval_ms,
            session.schedule.tone_frequency_hz,
        )
        return session

    def _cancel(self, session: AlertSession):
        if not session.cancel(timeout=self._join_timeout_seconds):
            logger.warning(
                "Alert timer for pin '%s' did not stop within %.1fs",
                session.pin_id,
                self._join_timeout_seconds,
            )

    def _run_session(self, session: AlertSession):
        interval = session.schedule.interval_seconds
        while not session.stop_event.wait(interval):
            self._emit(session)

    def _emit(self, session: AlertSession):
        with self._emit_lock:
            if session.is_cancelled:
                return
            self._emit_locked(session)

    def _emit_locked(self, session: AlertSession):
        tick = AlertTick(
            pin_id=session.pin_id,
            frequency_hz=session.schedule.tone_frequency_hz,
            interval_ms=session.schedule.interval_ms,
            duration_ms=self._cue_duration_ms,
            distance_m=session.distance_m,
            sequence=session.tick_count,
        )
        session.tick_count += 1
        session.last_tick_at = time.monotonic()

        # Dropped cues are not retried; the next tick carries on.
        if self._playback is not None:
            try:
                self._playback.emit_tone(tick.frequency_hz, tick.duration_ms)
            except Exception:
                logger.exception("Cue emission failed for pin '%s'", session.pin_id)

        with self._subscribers_lock:
            callbacks = list(self._subscribers.values())
        for callback in callbacks:
            try:
                callback(tick)
            except Exception:
                logger.exception("Alert subscriber failed for pin '%s'", session.pin_id)
