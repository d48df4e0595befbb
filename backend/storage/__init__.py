"""Pin storage package."""

from .exceptions import PinAlreadyExistsError, PinNotFoundError, PinStoreError
from .pins import InMemoryPinStore, PinStore

__all__ = [
    "InMemoryPinStore",
    "PinAlreadyExistsError",
    "PinNotFoundError",
    "PinStore",
    "PinStoreError",
]
