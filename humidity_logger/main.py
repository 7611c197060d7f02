"""
Main loop for the humidity logger.

Every cycle reads the sensor, stamps the sample with local time, stores it,
prunes readings older than the retention window, sleeps, and then checks
for an export request file. The loop is single threaded and runs until the
process is killed; component failures are logged and never end it.

Usage:

```bash
python -m humidity_logger.main --config config/pi.yaml
```
"""

from __future__ import annotations

import argparse
import datetime
import logging
import sqlite3
import sys
import time
from typing import Callable, Optional

import yaml

from . import clock
from .config import Config
from .db import ReadingStore
from .export import ExportTrigger
from .sensors.base import HumiditySensor, is_valid_humidity
from .sensors.mock_sensors import MockSensor
# Note: the HS3003 backend is imported lazily inside build_sensor so that the
# mock backend never touches the I2C stack on development machines.

RETENTION_WINDOW = datetime.timedelta(hours=48)
CYCLE_PERIOD_S = 30.0

EXIT_STORAGE_FAILURE = 1
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger(__name__)


class HumidityLogger:
    """Drives the read, store, prune, sleep, export cycle."""

    def __init__(self, sensor: HumiditySensor, store: ReadingStore, trigger: ExportTrigger,
                 now: Callable[[], str] = clock.now,
                 sleep: Callable[[float], None] = time.sleep,
                 cycle_period: float = CYCLE_PERIOD_S) -> None:
        self.sensor = sensor
        self.store = store
        self.trigger = trigger
        self._now = now
        self._sleep = sleep
        self.cycle_period = cycle_period

    def log_reading(self) -> bool:
        """Take one sample and store it. Returns True if a row was written."""
        humidity = self.sensor.read_humidity()
        timestamp = self._now()

        if not is_valid_humidity(humidity):
            logger.warning('No valid sample at %s; skipping', timestamp)
            return False
        if not self.store.insert(timestamp, humidity):
            logger.error('Failed to log reading at %s', timestamp)
            return False
        logger.info('Logged: %s | %.2f%%', timestamp, humidity)
        return True

    def handle_export_request(self) -> Optional[bool]:
        """Export if a request is pending. Returns None when there was none."""
        request = self.trigger.poll()
        if request is None:
            return None
        logger.info('Export requested: %s to %s', request.start_time, request.end_time)
        ok = self.store.export_range(request.start_time, request.end_time,
                                     request.destination_path)
        if not ok:
            logger.error('Export to %s failed; drop a new request to retry',
                         request.destination_path)
        return ok

    def run_cycle(self) -> None:
        """Run one full cycle.

        Unexpected component errors are logged and the cycle moves on; the
        sleep always happens so a persistent fault cannot spin the loop.
        """
        try:
            self.log_reading()
        except Exception as exc:
            logger.exception('Logging step error: %s', exc)
        try:
            if not self.store.prune_older_than(RETENTION_WINDOW):
                logger.error('Failed to prune readings older than %s', RETENTION_WINDOW)
        except Exception as exc:
            logger.exception('Prune step error: %s', exc)
        self._sleep(self.cycle_period)
        try:
            self.handle_export_request()
        except Exception as exc:
            logger.exception('Export step error: %s', exc)

    def run_forever(self) -> None:
        """Blocking loop; returns only on KeyboardInterrupt."""
        logger.info('Humidity logger started (cycle %.0fs, retention %s)',
                    self.cycle_period, RETENTION_WINDOW)
        try:
            while True:
                self.run_cycle()
        except KeyboardInterrupt:
            logger.info('Shutting down...')


def setup_logging(config: Config) -> None:
    """Configure logging to console and, optionally, to a file."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, config.log_level, logging.INFO))
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
    )
    # Console handler
    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(formatter)
    root.addHandler(ch)
    # File handler
    if config.log_file:
        fh = logging.FileHandler(config.log_file)
        fh.setFormatter(formatter)
        root.addHandler(fh)


def build_sensor(config: Config) -> HumiditySensor:
    """Instantiate the sensor backend named in the configuration."""
    if config.sensor_backend == 'mock':
        return MockSensor()
    from .sensors.hs3003 import HS3003Sensor
    return HS3003Sensor(bus=config.i2c_bus, address=config.i2c_address)


def open_store(db_path: str) -> Optional[ReadingStore]:
    """Open the database and create the schema; None if either fails."""
    try:
        store = ReadingStore(db_path)
    except sqlite3.Error as exc:
        logger.error('Error opening database %s: %s', db_path, exc)
        return None
    if not store.ensure_schema():
        store.close()
        return None
    return store


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Humidity logger service')
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='Path to YAML configuration file (defaults are used if omitted)')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        config = Config.from_yaml(args.config) if args.config else Config()
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f'Invalid configuration: {exc}', file=sys.stderr)
        return EXIT_CONFIG_ERROR

    config.ensure_paths()
    setup_logging(config)

    store = open_store(config.db_path)
    if store is None:
        return EXIT_STORAGE_FAILURE

    service = HumidityLogger(
        sensor=build_sensor(config),
        store=store,
        trigger=ExportTrigger(config.request_path, config.export_path),
    )
    with store:
        service.run_forever()
    return 0


if __name__ == '__main__':
    sys.exit(main())
