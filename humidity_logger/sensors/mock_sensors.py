"""
Mock sensors for development and testing.

This module defines a simple humidity sensor that returns random values. It
can be used on development machines to simulate a real sensor such as the
HS3003. A failure rate can be set to exercise the "no sample" path.
"""

from __future__ import annotations
import logging
import random
from typing import Optional

from .base import HumiditySensor

logger = logging.getLogger(__name__)


class MockSensor(HumiditySensor):
    """Mock sensor returning random humidity."""

    def __init__(self, low: float = 40.0, high: float = 70.0, failure_rate: float = 0.0,
                 rng: Optional[random.Random] = None) -> None:
        if not 0.0 <= low <= high <= 100.0:
            raise ValueError('Mock humidity range must lie within [0, 100]')
        self.low = low
        self.high = high
        self.failure_rate = failure_rate
        self._rng = rng or random.Random()

    def read_humidity(self) -> Optional[float]:
        """Return a simulated humidity sample, or None for a simulated bus failure."""
        if self.failure_rate and self._rng.random() < self.failure_rate:
            logger.error('Simulated bus failure')
            return None
        return round(self._rng.uniform(self.low, self.high), 2)
