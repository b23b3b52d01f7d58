from pathlib import Path
import json
import logging
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from logging_config import JSONFormatter, PlannerModeFilter, get_logger


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="planner_core",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="plan generated for %d weeks",
        args=(12,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_renders_message_and_level() -> None:
    payload = json.loads(JSONFormatter().format(make_record()))

    assert payload["msg"] == "plan generated for 12 weeks"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "planner_core"
    assert "context" not in payload
    assert "planner_mode" not in payload


def test_json_formatter_strips_context_prefix() -> None:
    payload = json.loads(JSONFormatter().format(make_record(ctx_weeks=12, other="ignored")))

    assert payload["context"] == {"weeks": 12}


def test_mode_filter_stamps_planner_mode() -> None:
    record = make_record(ctx_violations=3)
    assert PlannerModeFilter("single_tier").filter(record)

    payload = json.loads(JSONFormatter().format(record))
    assert payload["planner_mode"] == "single_tier"
    assert payload["context"] == {"violations": 3}


def test_mode_filter_keeps_explicit_mode() -> None:
    record = make_record(planner_mode="two_tier")
    PlannerModeFilter("single_tier").filter(record)

    assert record.planner_mode == "two_tier"


def test_get_logger_returns_named_logger() -> None:
    assert get_logger("planner_core") is logging.getLogger("planner_core")
