"""Custom exceptions for pin storage."""


class PinStoreError(Exception):
    """Base pin store exception."""


class PinAlreadyExistsError(PinStoreError):
    """Raised when adding a pin whose id is already stored."""


class PinNotFoundError(PinStoreError):
    """Raised when a pin does not exist in the store."""
