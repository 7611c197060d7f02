"""
HS3003 humidity sensor backend using smbus2.

Each call to ``read_humidity`` is one self-contained bus transaction: the
bus is opened, a measurement is triggered, the result frame is read after a
fixed settle delay, and the bus is closed again. No handle is kept between
calls, so a sensor that was unplugged or a bus that was reset does not leave
a stale handle behind.

The sensor answers with a 4-byte frame. The first two bytes carry the
humidity as a 16-bit big-endian value which is scaled linearly to percent.

Usage:

```python
from humidity_logger.sensors.hs3003 import HS3003Sensor
sensor = HS3003Sensor(bus='/dev/i2c-1', address=0x44)
humidity = sensor.read_humidity()   # None if the bus transaction failed
```
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Union

from smbus2 import SMBus, i2c_msg

from .base import HumiditySensor

DEFAULT_BUS = '/dev/i2c-1'
DEFAULT_ADDRESS = 0x44

MEASURE_COMMAND = 0x00
SETTLE_DELAY_S = 0.015
FRAME_LENGTH = 4
RAW_FULL_SCALE = 65535.0

logger = logging.getLogger(__name__)


def decode_humidity(frame: bytes) -> float:
    """Convert a raw HS3003 response frame to relative humidity in percent."""
    raw = (frame[0] << 8) | frame[1]
    return raw / RAW_FULL_SCALE * 100.0


class HS3003Sensor(HumiditySensor):
    """HS3003 sensor on an I2C bus."""

    def __init__(self, bus: Union[int, str] = DEFAULT_BUS, address: int = DEFAULT_ADDRESS,
                 settle_delay: float = SETTLE_DELAY_S) -> None:
        self.bus = bus
        self.address = address
        self.settle_delay = settle_delay

    def read_humidity(self) -> Optional[float]:
        """Trigger a measurement and read it back.

        Returns:
            Relative humidity in percent, or None if opening the bus, writing
            the trigger command or reading the frame failed.
        """
        try:
            bus = SMBus(self.bus)
        except OSError as exc:
            logger.error('Failed to open bus %s: %s', self.bus, exc)
            return None

        with bus:
            try:
                bus.i2c_rdwr(i2c_msg.write(self.address, [MEASURE_COMMAND]))
            except OSError as exc:
                logger.error('Failed to write measurement command to 0x%02x: %s', self.address, exc)
                return None

            time.sleep(self.settle_delay)

            response = i2c_msg.read(self.address, FRAME_LENGTH)
            try:
                bus.i2c_rdwr(response)
            except OSError as exc:
                logger.error('Failed to read data from 0x%02x: %s', self.address, exc)
                return None

        frame = bytes(list(response))
        if len(frame) != FRAME_LENGTH:
            logger.error('Short frame from 0x%02x: expected %d bytes, got %d',
                         self.address, FRAME_LENGTH, len(frame))
            return None
        return decode_humidity(frame)
