"""Log setup shared by the HTTP and stdio entry points."""

from __future__ import annotations

import json
import logging
import sys

from abstract_mcp.config import AbstractMcpConfig, default_config

# Fields lifted from ``extra=`` into the JSON line when present on a record.
EXTRA_FIELDS = ("tool", "request_id", "error", "transport")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(config: AbstractMcpConfig = default_config) -> None:
    """
    Install a stderr handler at the configured level.

    stdout is left alone because the stdio transport owns it.
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    handler = logging.StreamHandler(sys.stderr)
    if config.log_format.lower() == "json":
        handler.setFormatter(JsonFormatter())
    logging.basicConfig(level=level, handlers=[handler])
