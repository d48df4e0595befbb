"""
Pin store collaborator.

The engine only reads pin snapshots; writes go through ``add_pin``.
Nothing here is persisted across process restarts.
"""
from __future__ import annotations

import logging
import threading
from typing import Iterable, Protocol

from common.types import Pin
from storage.exceptions import PinAlreadyExistsError, PinNotFoundError

logger = logging.getLogger(__name__)


class PinStore(Protocol):
    def list_pins(self) -> list[Pin]:
        ...

    def add_pin(self, pin: Pin) -> None:
        ...


class InMemoryPinStore:
    """Thread-safe pin collection kept in insertion order."""

    def __init__(self, pins: Iterable[Pin] = ()):
        self._pins: dict[str, Pin] = {}
        self._lock = threading.Lock()
        for pin in pins:
            self.add_pin(pin)

    def list_pins(self) -> list[Pin]:
        with self._lock:
            return list(self._pins.values())

    def get_pin(self, pin_id: str) -> Pin:
        with self._lock:
            pin = self._pins.get(pin_id)
        if pin is None:
            raise PinNotFoundError(f"Pin '{pin_id}' not found")
        return pin

    def add_pin(self, pin: Pin) -> None:
        with self._lock:
            if pin.id in self._pins:
                raise PinAlreadyExistsError(f"Pin '{pin.id}' already exists")
            self._pins[pin.id] = pin
        logger.info("Added pin '%s' (%s)", pin.id, pin.title or "untitled")

    def __len__(self) -> int:
        with self._lock:
            return len(self._pins)
