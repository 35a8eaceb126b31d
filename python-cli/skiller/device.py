"""
Skiller Pro+ — USB device discovery and control-transfer backends.

Two interchangeable transports issue the same SET_REPORT request:

  * ``PyUsbTransport`` talks to libusb through pyusb and honours the
    transfer timeout.
  * ``HidApiTransport`` goes through the OS HID driver with hidapi, which
    often works without detaching anything or running as root.
"""

import logging
from abc import ABC, abstractmethod

from skiller.errors import DeviceAccessError, TransferTimeout, TransportError
from skiller.protocol import (VID, PID, INTERFACE, REQUEST_TYPE, SET_REPORT,
                              REPORT_VALUE, FRAME_LEN)

logger = logging.getLogger(__name__)


class Transport(ABC):
    """A single opened keyboard interface."""

    backend = None

    def __init__(self, timeout):
        self.timeout = timeout

    @property
    def timeout_ms(self):
        return max(1, int(round(self.timeout * 1000)))

    @abstractmethod
    def write_control(self, frame):
        """Send one feature report frame.

        Returns:
            int: bytes written.
        """

    @abstractmethod
    def close(self):
        """Release the interface and OS handle."""


# ── pyusb ────────────────────────────────────────────────────────────────
class PyUsbTransport(Transport):
    backend = "pyusb"

    def __init__(self, dev, timeout):
        super().__init__(timeout)
        self._dev = dev

    def write_control(self, frame):
        import usb.core

        if self._dev is None:
            raise TransportError("Device handle is closed")
        try:
            return self._dev.ctrl_transfer(REQUEST_TYPE, SET_REPORT, REPORT_VALUE,
                                           INTERFACE, frame, timeout=self.timeout_ms)
        except usb.core.USBTimeoutError as e:
            raise TransferTimeout(f"Control transfer timed out after {self.timeout_ms} ms") from e
        except usb.core.USBError as e:
            raise TransportError(f"Control transfer failed: {e}") from e

    def close(self):
        import usb.util

        if self._dev is not None:
            usb.util.dispose_resources(self._dev)
            self._dev = None


def _find_pyusb(timeout):
    import usb.core
    import usb.util

    try:
        dev = usb.core.find(idVendor=VID, idProduct=PID)
    except usb.core.NoBackendError as e:
        raise DeviceAccessError("No libusb backend available") from e
    except usb.core.USBError as e:
        raise DeviceAccessError(f"USB enumeration failed: {e}") from e

    if dev is None:
        return None

    # The HID driver owns interface 1; libusb returns an IO error until it
    # is detached.
    try:
        if dev.is_kernel_driver_active(INTERFACE):
            logger.debug(f"Detaching kernel driver from interface {INTERFACE}")
            dev.detach_kernel_driver(INTERFACE)
    except NotImplementedError:
        logger.debug("Kernel driver detach not supported on this platform")
    except usb.core.USBError as e:
        raise DeviceAccessError(
            f"Cannot detach kernel driver from interface {INTERFACE} "
            f"of 0x{VID:04X}:0x{PID:04X}: {e}"
        ) from e

    try:
        usb.util.claim_interface(dev, INTERFACE)
    except usb.core.USBError as e:
        raise DeviceAccessError(
            f"Cannot claim interface {INTERFACE} of 0x{VID:04X}:0x{PID:04X}: {e}"
        ) from e

    return PyUsbTransport(dev, timeout)


# ── hidapi ───────────────────────────────────────────────────────────────
class HidApiTransport(Transport):
    """hidapi has no per-call timeout; ``timeout`` is kept for reference."""

    backend = "hidapi"

    def __init__(self, dev, timeout):
        super().__init__(timeout)
        self._dev = dev

    def write_control(self, frame):
        if self._dev is None:
            raise TransportError("Device handle is closed")
        try:
            written = self._dev.send_feature_report(frame)
        except (OSError, ValueError) as e:
            raise TransportError(f"Feature report failed: {e}") from e
        if written < 0:
            raise TransportError(f"Feature report failed: {self._dev.error()}")
        return written

    def close(self):
        if self._dev is not None:
            self._dev.close()
            self._dev = None


def _find_hidapi(timeout):
    import hid

    info = None
    for d in hid.enumerate(VID, PID):
        if d["interface_number"] == INTERFACE:
            info = d
            break
    if info is None:
        return None

    dev = hid.device()
    try:
        dev.open_path(info["path"])
    except (OSError, ValueError) as e:
        raise DeviceAccessError(
            f"Cannot open HID device 0x{VID:04X}:0x{PID:04X}: {e}"
        ) from e
    return HidApiTransport(dev, timeout)


_FINDERS = {
    "pyusb": _find_pyusb,
    "hidapi": _find_hidapi,
}


def find_device(timeout, backend="pyusb"):
    """Scan the bus once for the keyboard and open it.

    Args:
        timeout: Transfer timeout in seconds for the returned transport.
        backend: "pyusb" or "hidapi".

    Returns:
        Transport, or None if no keyboard is attached.

    Raises:
        DeviceAccessError: the keyboard is attached but cannot be opened.
    """
    try:
        finder = _FINDERS[backend]
    except KeyError:
        raise ValueError(f"Unknown backend {backend!r}, expected one of {tuple(_FINDERS)}") from None

    transport = finder(timeout)
    if transport is None:
        logger.debug(f"No 0x{VID:04X}:0x{PID:04X} device found ({backend})")
        return None
    logger.info(f"Connected to Skiller Pro+ via {backend} (timeout {timeout:g}s)")
    return transport


def _tx(transport, frame):
    """Send one frame, checking its length first.

    Returns:
        int: bytes written.
    """
    if len(frame) != FRAME_LEN:
        raise ValueError(f"Frame must be {FRAME_LEN} bytes, got {len(frame)}")
    logger.debug(f"TX {bytes(frame).hex()}")
    return transport.write_control(bytes(frame))


def _tx_bulk(transport, frames):
    """Send frames in order; the first failure propagates.

    Returns:
        int: total bytes written.
    """
    return sum(_tx(transport, f) for f in frames)
