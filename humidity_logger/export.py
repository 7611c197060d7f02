"""
File-based export trigger.

Another process requests an export by dropping a small text file at a
well-known path (``export_request.txt`` by default). The file names the
range to export, start and end timestamps in the storage format, one per
line:

    2024-01-01 00:00:00
    2024-01-02 00:00:00

A single line ``start,end`` is accepted as well. A start after the end is
logged and yields an export with only the header row.

``ExportTrigger.poll`` claims the file by renaming it to a private name
before reading it and deletes it before any export is attempted. A request
is therefore consumed exactly once, even when it is malformed or the export
later fails, and whoever renames first wins when two pollers race. The
requester has to drop a new file to try again.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from .clock import parse_timestamp

DEFAULT_REQUEST_PATH = 'export_request.txt'
DEFAULT_EXPORT_PATH = 'export_custom.csv'

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportRequest:
    """A requested export of readings between two timestamps (inclusive)."""
    start_time: str
    end_time: str
    destination_path: str


def parse_request(content: str) -> Optional[List[str]]:
    """Extract [start, end] from trigger file content, or None if malformed."""
    lines = [line.strip() for line in content.splitlines() if line.strip()]
    if len(lines) == 1 and ',' in lines[0]:
        lines = [part.strip() for part in lines[0].split(',')]
    if len(lines) < 2:
        logger.warning('Export request needs a start and an end time, got %r', content)
        return None

    start, end = lines[0], lines[1]
    try:
        start_dt = parse_timestamp(start)
        end_dt = parse_timestamp(end)
    except ValueError as exc:
        logger.warning('Malformed timestamp in export request: %s', exc)
        return None
    if start_dt > end_dt:
        logger.warning('Export request start %s is after end %s; the export will be empty', start, end)
    return [start, end]


class ExportTrigger:
    """Polls for an export request file and consumes it."""

    def __init__(self, request_path: str = DEFAULT_REQUEST_PATH,
                 destination_path: str = DEFAULT_EXPORT_PATH) -> None:
        self.request_path = request_path
        self.destination_path = destination_path

    def _claim_path(self) -> str:
        return f'{self.request_path}.{os.getpid()}.claimed'

    def poll(self) -> Optional[ExportRequest]:
        """Consume a pending request, if any.

        Returns:
            The parsed request, or None if there is no trigger file or its
            content is unusable. A regular trigger file is always gone
            afterwards; anything else at that path (a directory, say) is
            left alone and reported.
        """
        if not os.path.exists(self.request_path):
            return None
        if not os.path.isfile(self.request_path):
            logger.error('Export request %s is not a regular file; ignoring it', self.request_path)
            return None

        claimed = self._claim_path()
        try:
            os.replace(self.request_path, claimed)
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error('Failed to claim export request %s: %s', self.request_path, exc)
            return None

        try:
            with open(claimed, 'r', encoding='utf-8') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.error('Failed to read export request %s: %s', self.request_path, exc)
            content = None
        finally:
            try:
                os.remove(claimed)
            except OSError as exc:
                logger.error('Failed to remove export request %s: %s', claimed, exc)

        if content is None:
            return None
        fields = parse_request(content)
        if fields is None:
            return None
        return ExportRequest(start_time=fields[0], end_time=fields[1],
                             destination_path=self.destination_path)
