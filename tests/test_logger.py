import io
import logging
import re

from yadoma.logger import ConsoleFormatter, configure_logging, get_env, level_from_name


def _record(level, msg, **extra):
    record = logging.LogRecord("yadoma.test", level, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_level_from_name_known_levels():
    assert level_from_name("debug") == logging.DEBUG
    assert level_from_name("INFO") == logging.INFO
    assert level_from_name("warn") == logging.WARNING
    assert level_from_name("Error") == logging.ERROR


def test_level_from_name_defaults_to_debug():
    assert level_from_name("verbose") == logging.DEBUG
    assert level_from_name("") == logging.DEBUG


def test_get_env_returns_value(monkeypatch):
    monkeypatch.setenv("YADOMA_TEST_VAR", "info")
    assert get_env("YADOMA_TEST_VAR", "debug") == "info"


def test_get_env_falls_back_when_unset_or_empty(monkeypatch):
    monkeypatch.delenv("YADOMA_TEST_VAR", raising=False)
    assert get_env("YADOMA_TEST_VAR", "debug") == "debug"
    monkeypatch.setenv("YADOMA_TEST_VAR", "")
    assert get_env("YADOMA_TEST_VAR", "debug") == "debug"


def test_formatter_info_line():
    line = ConsoleFormatter().format(_record(logging.INFO, "hello"))
    assert re.match(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2} ", line)
    assert "\033[32m| INFO  |\033[0m" in line
    assert line.endswith("***hello***")


def test_formatter_colors_per_level():
    formatter = ConsoleFormatter()
    assert "\033[33m| WARN  |\033[0m" in formatter.format(_record(logging.WARNING, "w"))
    assert "\033[31m| ERROR |\033[0m" in formatter.format(_record(logging.ERROR, "e"))
    assert "\033[34m| DEBUG |\033[0m" in formatter.format(_record(logging.DEBUG, "d"))


def test_formatter_fields_are_uppercased():
    line = ConsoleFormatter().format(_record(logging.INFO, "msg", fields={"id": "abc"}))
    assert line.endswith("***msg*** id:ABC")


def test_formatter_includes_exception_as_error_field():
    try:
        raise ValueError("bad thing")
    except ValueError:
        import sys

        record = logging.LogRecord("yadoma.test", logging.ERROR, __file__, 1, "oops", None, sys.exc_info())
    line = ConsoleFormatter().format(record)
    assert "error:BAD THING" in line


def test_configure_logging_sets_level_from_environment():
    out = io.StringIO()
    logger = configure_logging({"LOG_LEVEL": "warn"}, out)
    assert logger.level == logging.WARNING
    logging.getLogger("yadoma.child").info("hidden")
    logging.getLogger("yadoma.child").warning("shown")
    text = out.getvalue()
    assert "***hidden***" not in text
    assert "***shown***" in text


def test_configure_logging_defaults_to_debug():
    out = io.StringIO()
    logger = configure_logging({}, out)
    assert logger.level == logging.DEBUG
    logger.debug("dbg")
    assert "***dbg***" in out.getvalue()
    assert len(logger.handlers) == 1


def test_write_errors_are_reported_on_stderr(capsys):
    class BrokenStream:
        def write(self, data):
            raise OSError("closed")

        def flush(self):
            pass

    logger = configure_logging({"LOG_LEVEL": "debug"}, BrokenStream())
    logger.error("boom")
    err = capsys.readouterr().err
    assert "Logger write error: closed" in err
    assert "***boom***" in err