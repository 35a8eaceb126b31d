"""
Skiller Pro+ control protocol — constants, settings enums, frame builders.

Every command is a single 8-byte HID feature report (report id 0x07) sent
with a SET_REPORT control transfer to interface 1.
"""

from dataclasses import dataclass
from enum import IntEnum

# ── USB Identifiers ──────────────────────────────────────────────────────
VID       = 0x04D9
PID       = 0xA096
INTERFACE = 1

# ── Control transfer setup ───────────────────────────────────────────────
REQUEST_TYPE = 0x21    # host-to-device | class | interface
SET_REPORT   = 0x09
REPORT_VALUE = 0x0307  # report type 3 (feature) << 8 | report id

# ── Frame / command bytes ────────────────────────────────────────────────
REPORT_ID = 0x07
FRAME_LEN = 8

CMD_POLLING  = 0x01
CMD_PROFILE  = 0x02
CMD_LIGHTING = 0x0A
CMD_WIN_KEY  = 0x0B

LIGHTING_TAG = 0x04    # constant byte 4 of every lighting frame

MODE_FULL      = 0x0A  # static at full level, used by set_color
MODE_PULSATING = 11
MODE_CYCLE     = 12


# ── Settings ─────────────────────────────────────────────────────────────
class Color(IntEnum):
    RED = 0
    GREEN = 1
    BLUE = 2
    PURPLE = 3
    CYAN = 4
    YELLOW = 5
    WHITE = 6


class Profile(IntEnum):
    P1 = 1
    P2 = 2
    P3 = 3


class PollingRate(IntEnum):
    """Value is the poll interval in milliseconds."""

    HZ125 = 8
    HZ250 = 4
    HZ500 = 2
    HZ1000 = 1


@dataclass(frozen=True)
class Static:
    """A static color at the given brightness level."""

    level: int
    color: Color

    def __post_init__(self):
        if not isinstance(self.level, int):
            raise ValueError(f"Brightness level must be an integer, got {self.level!r}")
        if not 0 <= self.level <= 0xFF:
            raise ValueError(f"Brightness level must fit in a byte, got {self.level}")

    @property
    def mode(self):
        return self.level


@dataclass(frozen=True)
class Pulsating:
    """A single color pulsating."""

    color: Color
    mode = MODE_PULSATING


@dataclass(frozen=True)
class Cycle:
    """All colors pulsating in a cycle."""

    color = None
    mode = MODE_CYCLE


BRIGHTNESS_TYPES = (Static, Pulsating, Cycle)


# ── Frame builder ────────────────────────────────────────────────────────
def _build(cmd, *args):
    """Build an 8-byte feature report frame.

    Args:
        cmd:  Command byte (e.g. CMD_LIGHTING).
        args: Up to 6 argument bytes, zero-padded.

    Returns:
        bytes: 8-byte frame starting with REPORT_ID.
    """
    if len(args) > FRAME_LEN - 2:
        raise ValueError(f"Too many argument bytes ({len(args)})")
    f = bytearray(FRAME_LEN)
    f[0] = REPORT_ID
    f[1] = cmd
    for i, b in enumerate(args):
        f[2 + i] = b
    return bytes(f)


def switch_profile_frame(profile):
    return _build(CMD_PROFILE, Profile(profile))


def _lighting_frame(profile, mode, color):
    return _build(CMD_LIGHTING, Profile(profile), mode, LIGHTING_TAG, 0x00,
                  0 if color is None else Color(color))


def color_frame(color, profile):
    """Frame that sets a static color at full level on a profile."""
    return _lighting_frame(profile, MODE_FULL, color)


def brightness_frame(brightness, profile):
    """Frame for a Static, Pulsating or Cycle brightness on a profile."""
    if not isinstance(brightness, BRIGHTNESS_TYPES):
        raise TypeError(f"Expected a brightness setting, got {brightness!r}")
    return _lighting_frame(profile, brightness.mode, brightness.color)


def polling_rate_frame(rate):
    return _build(CMD_POLLING, PollingRate(rate))


def win_key_frame(enable, profile):
    """The firmware stores a *lock* flag: 0 keeps the key on, 1 disables it."""
    return _build(CMD_WIN_KEY, Profile(profile), 0 if enable else 1)


# ── Frame decoder ────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Frame:
    """A decoded command frame."""

    command: str
    profile: object = None
    setting: object = None
    raw: bytes = b""


def _decode_brightness(mode, color_byte):
    if mode == MODE_CYCLE:
        return Cycle()
    color = Color(color_byte)
    if mode == MODE_PULSATING:
        return Pulsating(color)
    return Static(mode, color)


def decode_frame(frame):
    """Decode an 8-byte frame produced by one of the builders above.

    Lighting frames always decode to a brightness setting; a plain
    set_color frame comes back as ``Static(MODE_FULL, color)``.

    Raises:
        ValueError: wrong length, report id, command or field value.
    """
    raw = bytes(frame)
    if len(raw) != FRAME_LEN:
        raise ValueError(f"Expected {FRAME_LEN} bytes, got {len(raw)}")
    if raw[0] != REPORT_ID:
        raise ValueError(f"Unexpected report id 0x{raw[0]:02X}")

    cmd = raw[1]
    if cmd == CMD_PROFILE:
        return Frame("profile", Profile(raw[2]), None, raw)
    if cmd == CMD_LIGHTING:
        return Frame("lighting", Profile(raw[2]), _decode_brightness(raw[3], raw[6]), raw)
    if cmd == CMD_POLLING:
        return Frame("polling_rate", None, PollingRate(raw[2]), raw)
    if cmd == CMD_WIN_KEY:
        if raw[3] not in (0, 1):
            raise ValueError(f"Unexpected win key flag 0x{raw[3]:02X}")
        return Frame("win_key", Profile(raw[2]), raw[3] == 0, raw)
    raise ValueError(f"Unknown command byte 0x{cmd:02X}")
