"""
Shared test fixtures for the humidity logger test suite.

Provides:
- A ReadingStore backed by a temporary SQLite file with the schema created
- A scripted sensor that replays a fixed list of samples
- A fake clock producing increasing timestamps
"""

from __future__ import annotations

import datetime
import logging

import pytest

from humidity_logger.clock import TIMESTAMP_FORMAT
from humidity_logger.db import ReadingStore
from humidity_logger.sensors.base import HumiditySensor

logging.getLogger('humidity_logger').setLevel(logging.DEBUG)


class ScriptedSensor(HumiditySensor):
    """Returns the given samples in order, then None."""

    def __init__(self, samples):
        self.samples = list(samples)
        self.calls = 0

    def read_humidity(self):
        self.calls += 1
        if self.samples:
            return self.samples.pop(0)
        return None


class FakeClock:
    """Produces timestamps starting at ``start`` and advancing by ``step`` per call."""

    def __init__(self, start: datetime.datetime, step: datetime.timedelta = datetime.timedelta(seconds=30)):
        self.current = start
        self.step = step

    def __call__(self) -> str:
        value = self.current.strftime(TIMESTAMP_FORMAT)
        self.current += self.step
        return value


def stamp(dt: datetime.datetime) -> str:
    return dt.strftime(TIMESTAMP_FORMAT)


def all_rows(store: ReadingStore):
    return [
        (row['timestamp'], row['humidity'])
        for row in store.conn.execute('SELECT timestamp, humidity FROM Humidity ORDER BY id')
    ]


@pytest.fixture()
def store(tmp_path):
    """ReadingStore on a fresh database file with the Humidity table created."""
    s = ReadingStore(str(tmp_path / 'Humidity.db'))
    assert s.ensure_schema()
    yield s
    s.close()


@pytest.fixture()
def recent_clock():
    """Fake clock starting one hour ago, so its readings survive pruning."""
    return FakeClock(datetime.datetime.now().replace(microsecond=0) - datetime.timedelta(hours=1))
