"""
Skiller Pro+ — keyboard handle and lighting/settings commands.

Example::

    from skiller import SkillerProPlus, Color, Profile, Pulsating

    with SkillerProPlus.open(timeout=2) as kb:
        kb.set_color(Color.RED, Profile.P2)
        kb.set_brightness(Pulsating(Color.BLUE), Profile.P3)
"""

import logging

from skiller.config import load_settings
from skiller.device import find_device, _tx, _tx_bulk
from skiller.errors import DeviceNotFound
from skiller.protocol import (VID, PID, switch_profile_frame, color_frame,
                              brightness_frame, polling_rate_frame, win_key_frame)

logger = logging.getLogger(__name__)


class SkillerProPlus:
    """An opened Skiller Pro+ keyboard.

    Only one keyboard is supported; discovery picks the first match.
    Every method is a blocking sequence of control transfers and returns
    the number of bytes written, or raises TransportError.
    """

    def __init__(self, transport):
        self._transport = transport

    @classmethod
    def discover(cls, timeout=None, backend=None):
        """Find the keyboard and open it.

        Args:
            timeout: Transfer timeout in seconds. None or a non-positive
                     value uses SKILLER_TIMEOUT / the default (2 s).
            backend: "pyusb" or "hidapi"; None uses SKILLER_BACKEND.

        Returns:
            SkillerProPlus, or None if no keyboard is attached.
        """
        settings = load_settings()
        if timeout is None:
            timeout = settings.timeout
        elif timeout <= 0:
            logger.warning(f"Non-positive timeout {timeout}, using {settings.timeout:g}s")
            timeout = settings.timeout
        transport = find_device(timeout, backend or settings.backend)
        if transport is None:
            return None
        return cls(transport)

    @classmethod
    def open(cls, timeout=None, backend=None):
        """Like discover(), but raises DeviceNotFound instead of returning None."""
        kb = cls.discover(timeout, backend)
        if kb is None:
            raise DeviceNotFound(f"No Skiller Pro+ (0x{VID:04X}:0x{PID:04X}) attached")
        return kb

    @property
    def timeout(self):
        return self._transport.timeout

    @property
    def backend(self):
        return self._transport.backend

    def set_color(self, color, profile):
        """Set a static color at full level for the given profile."""
        return _tx_bulk(self._transport, [switch_profile_frame(profile),
                                          color_frame(color, profile)])

    def set_brightness(self, brightness, profile):
        """Set the brightness mode and its color for the given profile.

        The color travels with the mode because the firmware stores both in
        the same frame.
        """
        return _tx_bulk(self._transport, [switch_profile_frame(profile),
                                          brightness_frame(brightness, profile)])

    def set_profile(self, profile):
        return _tx(self._transport, switch_profile_frame(profile))

    def set_polling_rate(self, rate):
        """Set the global (profile-independent) polling rate."""
        return _tx(self._transport, polling_rate_frame(rate))

    def set_win_key(self, enable, profile):
        return _tx(self._transport, win_key_frame(enable, profile))

    def close(self):
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
