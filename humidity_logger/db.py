"""
SQLite persistence for humidity readings.

``ReadingStore`` owns a single connection for the lifetime of the process
and exposes the handful of operations the logger loop needs: schema
creation, inserting a reading, pruning readings older than the retention
window, and exporting a time range to CSV.

The table layout is shared with files written by earlier versions of the
logger and must not change:

    Humidity(id INTEGER PRIMARY KEY AUTOINCREMENT,
             timestamp TEXT NOT NULL,
             humidity REAL NOT NULL)

Timestamps are stored as local time strings (``YYYY-MM-DD HH:MM:SS``), which
sort lexicographically in time order. Every operation reports failure through
its return value and a log line; only opening the database raises.
"""

from __future__ import annotations

import csv
import datetime
import logging
import sqlite3
from typing import Iterator, Tuple

from .sensors.base import is_valid_humidity

EXPORT_HEADER = ('timestamp', 'humidity')

logger = logging.getLogger(__name__)


class ReadingStore:
    """Durable log of (timestamp, humidity) rows backed by one SQLite file."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path
        # Raises sqlite3.Error; the caller treats that as fatal at startup.
        self.conn = sqlite3.connect(db_path)
        self.conn.row_factory = sqlite3.Row

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> 'ReadingStore':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def ensure_schema(self) -> bool:
        """Create the Humidity table if it does not exist yet."""
        try:
            with self.conn:
                self.conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Humidity (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        timestamp TEXT NOT NULL,
                        humidity REAL NOT NULL
                    )
                    """
                )
        except sqlite3.Error as exc:
            logger.error('Error creating table: %s', exc)
            return False
        return True

    def insert(self, timestamp: str, humidity: float) -> bool:
        """Append one reading. Out-of-range humidity is refused."""
        if not is_valid_humidity(humidity):
            logger.error('Refusing to store out-of-range humidity %r at %s', humidity, timestamp)
            return False
        try:
            with self.conn:
                self.conn.execute(
                    'INSERT INTO Humidity (timestamp, humidity) VALUES (?, ?)',
                    (timestamp, float(humidity)),
                )
        except sqlite3.Error as exc:
            logger.error('Failed to insert reading: %s', exc)
            return False
        return True

    def prune_older_than(self, window: datetime.timedelta) -> bool:
        """Delete readings stamped at or before ``now - window``.

        The cutoff is evaluated by SQLite in local time at the moment of the
        delete, matching the local timestamps written by the logger.
        """
        modifier = f'-{int(window.total_seconds())} seconds'
        try:
            with self.conn:
                cur = self.conn.execute(
                    "DELETE FROM Humidity WHERE timestamp <= datetime('now', 'localtime', ?)",
                    (modifier,),
                )
        except sqlite3.Error as exc:
            logger.error('Cleanup error: %s', exc)
            return False
        if cur.rowcount:
            logger.debug('Pruned %d readings older than %s', cur.rowcount, window)
        return True

    def fetch_range(self, start_time: str, end_time: str) -> Iterator[Tuple[str, float]]:
        """Yield (timestamp, humidity) rows in [start_time, end_time], oldest first.

        Raises:
            sqlite3.Error: if the query cannot be run.
        """
        cur = self.conn.execute(
            """
            SELECT timestamp, humidity
            FROM Humidity
            WHERE timestamp >= ? AND timestamp <= ?
            ORDER BY timestamp ASC, id ASC
            """,
            (start_time, end_time),
        )
        for row in cur:
            yield row['timestamp'], row['humidity']

    def export_range(self, start_time: str, end_time: str, destination_path: str) -> bool:
        """Write readings in [start_time, end_time] to a CSV file.

        The destination is truncated and starts with a ``timestamp,humidity``
        header. A failed export may leave a partially written file behind.

        Returns:
            True if the file was written completely, False otherwise.
        """
        try:
            out = open(destination_path, 'w', newline='', encoding='utf-8')
        except OSError as exc:
            logger.error('Failed to open output file %s: %s', destination_path, exc)
            return False

        count = 0
        # Buffered rows may only hit the disk when the file is closed, so the
        # handlers cover the close as well as the writes.
        try:
            with out:
                writer = csv.writer(out, lineterminator='\n')
                writer.writerow(EXPORT_HEADER)
                for timestamp, humidity in self.fetch_range(start_time, end_time):
                    writer.writerow((timestamp, humidity))
                    count += 1
        except sqlite3.Error as exc:
            logger.error('Failed to run export query: %s', exc)
            return False
        except OSError as exc:
            logger.error('Failed to write output file %s: %s', destination_path, exc)
            return False

        logger.info('Export complete: %s (%d rows)', destination_path, count)
        return True
