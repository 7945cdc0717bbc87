"""Structured Logging — one JSON object per log line, or plain text for local runs.

Invariants:
    - Every line carries timestamp (UTC, ISO 8601), level, logger and message
    - Only the whitelisted extra keys are copied from a record; anything else passed via extra= is dropped
    - setup_logging owns exactly one root handler (named "chainlab"); calling it again swaps that handler

Design Decisions:
    - Standard logging with a small Formatter subclass: modules only ever call logging.getLogger(__name__)
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_KEYS = frozenset({
    "session_id", "tool_name", "error_code", "attempt",
    "input_tokens", "output_tokens", "store_name", "table",
    "path", "backend",
})

HANDLER_NAME = "chainlab"
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value) for key, value in vars(record).items()
            if key in EXTRA_KEYS and value is not None
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    root = logging.getLogger()
    for handler in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)
    root.setLevel(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    return handler
