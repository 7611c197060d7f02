"""
Humidity sensor abstractions.

This module defines the interface that all sensor backends must implement.
A sensor backend performs one complete acquisition per call and reports the
relative humidity as a percentage, or ``None`` when no sample could be taken.
Backends never raise on acquisition failure; they log a diagnostic instead.

Implementations may use random data for development/testing or talk to real
hardware on a Raspberry Pi (e.g., an HS3003 on the I2C bus).
"""

from __future__ import annotations
from typing import Optional

HUMIDITY_MIN = 0.0
HUMIDITY_MAX = 100.0


def is_valid_humidity(value: Optional[float]) -> bool:
    """Return True if ``value`` is a usable humidity percentage.

    ``None`` and anything outside [0, 100] (including the legacy ``-1``
    failure marker) are rejected.
    """
    if value is None:
        return False
    return HUMIDITY_MIN <= value <= HUMIDITY_MAX


class HumiditySensor:
    """Abstract base class for humidity sensor backends."""

    def read_humidity(self) -> Optional[float]:
        """Acquire one humidity sample.

        Returns:
            Relative humidity in percent, or None if the acquisition failed.

        Raises:
            NotImplementedError: if not implemented by subclass.
        """
        raise NotImplementedError('read_humidity must be implemented by subclasses')
