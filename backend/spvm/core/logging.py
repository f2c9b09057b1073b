"""Logging setup for the versioning console.

Provides a ``ContextualLogger`` that carries structured dimensions (batch id,
site, library) on every record, plus a custom ``SUCCESS`` level used by the
operator log to tag positive outcomes.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from spvm.core.config import settings

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_RESERVED_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """Logger adapter that merges persistent dimensions into every record.

    Usage:
        batch_logger = logger.with_context(batch_id="abc")
        site_logger = batch_logger.with_context(site="https://...")
        site_logger.info("Connecting")
    """

    def __init__(self, logger: logging.Logger, dimensions: Optional[Dict[str, Any]] = None):
        """Initialize the contextual logger.

        Args:
            logger: Underlying stdlib logger
            dimensions: Key/value pairs attached to every record
        """
        super().__init__(logger, {})
        self.dimensions: Dict[str, Any] = dict(dimensions or {})

    def process(self, msg, kwargs):
        """Attach dimensions to the record's ``extra``."""
        extra = dict(self.dimensions)
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(self, **dimensions: Any) -> "ContextualLogger":
        """Return a new logger with additional dimensions."""
        return ContextualLogger(self.logger, {**self.dimensions, **dimensions})

    def success(self, msg, *args, **kwargs) -> None:
        """Log a message at SUCCESS level."""
        self.log(SUCCESS, msg, *args, **kwargs)


def _configure_root_logger() -> logging.Logger:
    base = logging.getLogger("spvm")
    base.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))

    if not base.handlers:
        handler = logging.StreamHandler(sys.stdout)
        if settings.LOG_FORMAT_JSON:
            handler.setFormatter(JSONFormatter())
        else:
            handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
        base.addHandler(handler)

    return base


logger = ContextualLogger(_configure_root_logger())
