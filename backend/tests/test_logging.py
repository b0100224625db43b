"""Tests for JSON structured logging."""
import json
import logging
import sys


def _record(name: str = "test-service", level: int = logging.INFO, msg: str = "test message", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name=name,
        level=level,
        pathname="",
        lineno=0,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_json_formatter_outputs_valid_json() -> None:
    """JSONFormatter should produce valid JSON output."""
    from photobooth.core.logging import JSONFormatter
    output = JSONFormatter().format(_record())
    parsed = json.loads(output)
    assert isinstance(parsed, dict)


def test_json_formatter_has_required_fields() -> None:
    """Log output must contain timestamp, level, service, message fields."""
    from photobooth.core.logging import JSONFormatter
    output = JSONFormatter().format(
        _record(name="my-service", level=logging.WARNING, msg="something happened")
    )
    parsed = json.loads(output)

    assert "timestamp" in parsed
    assert parsed["level"] == "WARNING"
    assert parsed["service"] == "my-service"
    assert parsed["message"] == "something happened"


def test_json_formatter_includes_error_type_on_exception() -> None:
    """Log output should include error_type field when an exception is attached."""
    from photobooth.core.logging import JSONFormatter
    try:
        raise ValueError("test error")
    except ValueError:
        exc_info = sys.exc_info()

    parsed = json.loads(JSONFormatter().format(_record(level=logging.ERROR, exc_info=exc_info)))

    assert parsed["error_type"] == "ValueError"
    assert "test error" in parsed["error_detail"]


def test_json_formatter_copies_context_fields() -> None:
    """variant/stage passed through `extra=` appear in the JSON line."""
    from photobooth.core.logging import JSONFormatter
    record = _record()
    record.variant = "adventurer"
    record.stage = "original_uploaded"
    parsed = json.loads(JSONFormatter().format(record))

    assert parsed["variant"] == "adventurer"
    assert parsed["stage"] == "original_uploaded"
    assert "response_id" not in parsed


def test_json_formatter_keeps_non_ascii() -> None:
    from photobooth.core.logging import JSONFormatter
    output = JSONFormatter().format(_record(msg="Réponse inconnue"))
    assert "Réponse inconnue" in output


def test_setup_logging_returns_logger() -> None:
    """setup_logging() should return a configured Logger instance."""
    from photobooth.core.logging import setup_logging
    logger = setup_logging("test-app")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "test-app"


def test_setup_logging_does_not_duplicate_handlers() -> None:
    from photobooth.core.logging import setup_logging
    setup_logging("test-dedupe")
    logger = setup_logging("test-dedupe")
    assert len(logger.handlers) == 1


def test_setup_logging_reads_level_from_env(monkeypatch) -> None:
    from photobooth.core.logging import setup_logging
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert setup_logging("test-level-debug").level == logging.DEBUG


def test_setup_logging_unknown_level_falls_back_to_info(monkeypatch) -> None:
    from photobooth.core.logging import setup_logging
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert setup_logging("test-level-unknown").level == logging.INFO
