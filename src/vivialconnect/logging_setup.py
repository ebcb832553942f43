from __future__ import annotations
import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Optional

DEFAULT_FIELDS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs",
    "relativeCreated", "thread", "threadName", "processName", "process", "taskName",
}

# never let these reach a log line, whatever a caller puts in `extra`
REDACTED_FIELDS = {"api_key", "api_secret", "authorization", "Authorization"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        # include any custom attributes given via logging.extra
        for k, v in record.__dict__.items():
            if k in DEFAULT_FIELDS:
                continue
            payload[k] = "***" if k in REDACTED_FIELDS else v
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", stream: Optional[IO[str]] = None) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())
    # urllib3 logs full request lines at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    root.handlers.clear()
    root.addHandler(handler)
