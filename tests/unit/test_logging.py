from __future__ import annotations

import io
import json
import logging

import pytest

from appboot.observability.logging import ALWAYS, SILENT, TRACE, configure_logging, get_logger, parse_level


def _lines(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_json_records_carry_scope_and_fields() -> None:
    stream = io.StringIO()
    configure_logging(level="debug", stream=stream)

    log = get_logger("app").child(scope="users", request_id="r1")
    log.info("hello %s", "world")

    (record,) = _lines(stream)
    assert record["msg"] == "hello world"
    assert record["level"] == "info"
    assert record["scope"] == "users"
    assert record["request_id"] == "r1"
    assert record["logger"] == "appboot"
    assert "time" in record


def test_level_filters_records() -> None:
    stream = io.StringIO()
    configure_logging(level="error", stream=stream)

    log = get_logger("app")
    log.info("hidden")
    log.error("shown")
    log.always("announced")

    assert [r["msg"] for r in _lines(stream)] == ["shown", "announced"]
    assert _lines(stream)[1]["level"] == "always"


def test_silent_suppresses_always() -> None:
    stream = io.StringIO()
    configure_logging(level=SILENT, stream=stream)

    get_logger("app").always("nothing")

    assert stream.getvalue() == ""


def test_reconfiguring_replaces_handler() -> None:
    first, second = io.StringIO(), io.StringIO()
    configure_logging(level="info", stream=first)
    configure_logging(level="info", stream=second)

    get_logger("app").info("once")

    assert first.getvalue() == ""
    assert len(_lines(second)) == 1
    owned = [h for h in logging.getLogger("appboot").handlers if getattr(h, "_appboot_handler", False)]
    assert len(owned) == 1


def test_text_format() -> None:
    stream = io.StringIO()
    configure_logging(level="info", fmt="text", stream=stream)

    get_logger("app").info("plain")

    assert "scope=app" in stream.getvalue()
    assert "plain" in stream.getvalue()


@pytest.mark.parametrize(
    ("level", "expected"),
    [
        (None, logging.ERROR),
        ("debug", logging.DEBUG),
        ("WARNING", logging.WARNING),
        ("warn", logging.WARNING),
        ("fatal", logging.CRITICAL),
        ("trace", TRACE),
        ("always", ALWAYS),
        ("silent", SILENT),
        (15, 15),
    ],
)
def test_parse_level(level: object, expected: int) -> None:
    assert parse_level(level) == expected  # type: ignore[arg-type]


def test_parse_level_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        parse_level("chatty")
