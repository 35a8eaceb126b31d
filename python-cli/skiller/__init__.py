"""Skiller Pro+ keyboard lighting control over USB."""

from skiller.errors import (SkillerError, DeviceNotFound, TransportError,
                            DeviceAccessError, TransferTimeout)
from skiller.keyboard import SkillerProPlus
from skiller.protocol import (Color, Profile, PollingRate, Static, Pulsating,
                              Cycle, BRIGHTNESS_TYPES, decode_frame)

__all__ = [
    "SkillerProPlus",
    "Color",
    "Profile",
    "PollingRate",
    "Static",
    "Pulsating",
    "Cycle",
    "BRIGHTNESS_TYPES",
    "decode_frame",
    "SkillerError",
    "DeviceNotFound",
    "TransportError",
    "DeviceAccessError",
    "TransferTimeout",
]
