from __future__ import annotations

import contextvars
import json
import logging
import os
from typing import Optional

_connection_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "connection_id", default=None
)


def get_connection_id() -> Optional[str]:
    return _connection_id.get()


def set_connection_id(value: Optional[str]) -> contextvars.Token:
    return _connection_id.set(value)


def reset_connection_id(token: contextvars.Token) -> None:
    _connection_id.reset(token)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        data = {
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "connection_id": get_connection_id(),
        }
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data)


def setup_json_logging(level: str | None = None):
    lvl = getattr(logging, (level or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(lvl)
