"""Exceptions module."""


class SkillerError(Exception):
    """Base class for all keyboard errors."""


class DeviceNotFound(SkillerError):
    """Raised when no Skiller Pro+ is attached."""


class TransportError(SkillerError):
    """Raised when a USB access, IO or timeout failure occurs."""


class DeviceAccessError(TransportError):
    """Raised when the keyboard is present but cannot be opened or claimed."""


class TransferTimeout(TransportError):
    """Raised when a control transfer times out."""
