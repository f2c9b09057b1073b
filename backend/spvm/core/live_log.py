"""Rolling operator log.

The console shows the last ``LIVE_LOG_CAPACITY`` log lines with level tags.
Entries are fed by a ``logging.Handler`` so anything logged through the
console's ``ContextualLogger`` reaches both stdout and the operator log.
"""

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Deque, List, Optional

from spvm.core.config import settings
from spvm.core.logging import SUCCESS
from spvm.core.shared_models import LogLevel
from spvm.schemas.console import LogEntry


def _level_for_record(levelno: int) -> LogLevel:
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARNING
    if levelno >= SUCCESS:
        return LogLevel.SUCCESS
    return LogLevel.INFO


class LiveLog:
    """Append-only, capacity-bounded log; the oldest entry is dropped when full."""

    def __init__(self, capacity: Optional[int] = None):
        """Initialize the log.

        Args:
            capacity: Maximum number of entries kept (defaults to settings)
        """
        self.capacity = capacity or settings.LIVE_LOG_CAPACITY
        self._entries: Deque[LogEntry] = deque(maxlen=self.capacity)

    def add(self, level: LogLevel, message: str) -> LogEntry:
        """Append an entry and return it."""
        return self.append(LogEntry(level=level, message=message))

    def append(self, entry: LogEntry) -> LogEntry:
        """Append a prebuilt entry and return it."""
        self._entries.append(entry)
        return entry

    def entries(self) -> List[LogEntry]:
        """Entries in chronological order."""
        return list(self._entries)

    def clear(self) -> None:
        """Drop every entry and record that the log was cleared."""
        self._entries.clear()
        self.add(LogLevel.INFO, "Log cleared")

    def __len__(self) -> int:
        return len(self._entries)


class LiveLogHandler(logging.Handler):
    """Logging handler that copies records of one console into its ``LiveLog``.

    Only records carrying ``console_id`` equal to this handler's id are kept,
    so several consoles can share the ``spvm`` logger tree.
    """

    def __init__(self, live_log: LiveLog, console_id: str, level: int = logging.INFO):
        """Initialize the handler.

        Args:
            live_log: Destination log
            console_id: Value of the ``console_id`` dimension to accept
            level: Minimum record level
        """
        super().__init__(level=level)
        self.live_log = live_log
        self.console_id = console_id

    def filter(self, record: logging.LogRecord) -> bool:
        """Accept only records emitted by the owning console."""
        return getattr(record, "console_id", None) == self.console_id and super().filter(record)

    def emit(self, record: logging.LogRecord) -> None:
        """Append the record to the live log."""
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
                level=_level_for_record(record.levelno),
                message=record.getMessage(),
            )
            self.live_log.append(entry)
        except Exception:
            self.handleError(record)
