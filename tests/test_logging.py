import json
import logging

from phone_lookup.logging_config import JsonFormatter


def _record(**extra):
    record = logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello %s",
        args=("world",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter():
    data = json.loads(JsonFormatter().format(_record()))
    assert data["message"] == "hello world"
    assert data["level"] == "INFO"
    assert "e164" not in data


def test_json_formatter_keeps_lookup_fields():
    data = json.loads(JsonFormatter().format(_record(e164="+14155552671", tier="cache")))
    assert data["e164"] == "+14155552671"
    assert data["tier"] == "cache"
