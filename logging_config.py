"""JSON log lines for the planner.

Every record carries the planner mode it was produced under; per-call values
passed as ``extra={"ctx_<name>": ...}`` end up in ``context`` without the
``ctx_`` prefix, e.g. ``{"violations": 3}`` for a rejected plan request.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

CONTEXT_PREFIX = "ctx_"


class PlannerModeFilter(logging.Filter):
    def __init__(self, planner_mode: str):
        super().__init__()
        self.planner_mode = planner_mode

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "planner_mode"):
            record.planner_mode = self.planner_mode
        return True


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        key[len(CONTEXT_PREFIX):]: value
        for key, value in record.__dict__.items()
        if key.startswith(CONTEXT_PREFIX)
    }


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        mode = getattr(record, "planner_mode", None)
        if mode:
            entry["planner_mode"] = mode
        context = record_context(record)
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[1]:
            entry["error"] = f"{type(record.exc_info[1]).__name__}: {record.exc_info[1]}"
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", *, planner_mode: Optional[str] = None) -> None:
    """Install the JSON handler once; Streamlit reruns the page on every interaction."""
    root = logging.getLogger()
    if any(getattr(handler, "_planner_json", False) for handler in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    if planner_mode:
        handler.addFilter(PlannerModeFilter(planner_mode))
    handler._planner_json = True
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("streamlit").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
