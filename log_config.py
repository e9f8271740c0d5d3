"""
Logging setup for the quiz API.
Renders every record as one line of JSON on stdout.
"""
import json
import logging
import os
import sys
import time


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        base = {
            "level": record.levelname,
            "ts": round(time.time(), 3),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            base["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False)


def configure_logging(level: int | str | None = None) -> logging.Logger:
    """
    Configure root logging to stdout with the JSON formatter.

    Args:
        level: Logging level; falls back to LOG_LEVEL from the environment, then INFO.

    Returns:
        The application logger.
    """
    level = level or os.getenv("LOG_LEVEL", "INFO").upper()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    logging.basicConfig(level=level, handlers=[handler], force=True)
    return logging.getLogger("study_quiz")
