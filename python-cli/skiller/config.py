"""
Environment-driven defaults for transfer timeout and USB backend.

    SKILLER_TIMEOUT   transfer timeout in seconds (default 2.0)
    SKILLER_BACKEND   "pyusb" or "hidapi" (default "pyusb")
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0
DEFAULT_BACKEND = "pyusb"
BACKENDS = ("pyusb", "hidapi")


@dataclass(frozen=True)
class Settings:
    timeout: float = DEFAULT_TIMEOUT
    backend: str = DEFAULT_BACKEND


def _timeout_from_env():
    raw = os.getenv("SKILLER_TIMEOUT")
    if raw is None:
        return DEFAULT_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Ignoring SKILLER_TIMEOUT={raw!r}: not a number")
        return DEFAULT_TIMEOUT
    if value <= 0:
        logger.warning(f"Ignoring SKILLER_TIMEOUT={raw!r}: must be positive")
        return DEFAULT_TIMEOUT
    return value


def _backend_from_env():
    raw = os.getenv("SKILLER_BACKEND")
    if raw is None:
        return DEFAULT_BACKEND
    name = raw.strip().lower()
    if name not in BACKENDS:
        logger.warning(f"Ignoring SKILLER_BACKEND={raw!r}: expected one of {BACKENDS}")
        return DEFAULT_BACKEND
    return name


def load_settings():
    """Read Settings from the environment, falling back to defaults."""
    return Settings(timeout=_timeout_from_env(), backend=_backend_from_env())
