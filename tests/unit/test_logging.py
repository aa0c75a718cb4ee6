from __future__ import annotations

import json
import logging

from nplusone.utils.logging import _json_formatter, build_logging_config

EXPECTED_ROWS = 10
EXPECTED_ROUND_TRIPS = 101


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.rows = EXPECTED_ROWS
    record.strategy = "naive"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["rows"] == EXPECTED_ROWS
    assert payload["strategy"] == "naive"
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"round_trips": EXPECTED_ROUND_TRIPS}

    payload = json.loads(_json_formatter(record))

    assert payload["round_trips"] == EXPECTED_ROUND_TRIPS


def test_json_formatter_stringifies_unserializable_values() -> None:
    record = _record()
    record.strategies = {"naive"}

    payload = json.loads(_json_formatter(record))

    assert payload["strategies"] == "{'naive'}"


def test_logging_config_selects_formatter_and_quiets_pool() -> None:
    config = build_logging_config(level="debug", json_logs=True)

    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["stderr"]["formatter"] == "json"
    assert config["handlers"]["stderr"]["stream"] == "ext://sys.stderr"
    assert config["loggers"]["psycopg.pool"] == {"level": "WARNING"}
    assert build_logging_config()["handlers"]["stderr"]["formatter"] == "console"
