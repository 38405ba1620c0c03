import logging

import pytest
from rich.logging import RichHandler

from auth.tokens import TokenIssuer
from logging_config import RedactingFilter, configure_logging, get_logger, redact, resolve_log_level


def _record(msg, *args) -> logging.LogRecord:
    return logging.LogRecord("t", logging.INFO, __file__, 1, msg, args, None)


def test_get_logger_attaches_one_redacting_rich_handler():
    logger = get_logger("lg-rich-1")
    handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
    assert len(handlers) == 1
    assert any(isinstance(f, RedactingFilter) for f in handlers[0].filters)
    assert handlers[0].formatter._fmt == "%(name)s: %(message)s"


def test_get_logger_no_duplicate_handlers():
    logger = get_logger("dup-logger")
    n = len(logger.handlers)
    assert get_logger("dup-logger") is logger
    assert len(logger.handlers) == n


def test_repeated_setup_updates_level():
    logger = get_logger("relevel-logger", "INFO")
    get_logger("relevel-logger", "DEBUG")
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)


def test_configure_logging_sets_every_project_logger():
    configure_logging("WARNING", names=("cfg-a", "cfg-b"))
    assert logging.getLogger("cfg-a").level == logging.WARNING
    assert logging.getLogger("cfg-b").level == logging.WARNING


def test_resolve_log_level():
    assert resolve_log_level("debug") == logging.DEBUG
    assert resolve_log_level("WARNING") == logging.WARNING
    assert resolve_log_level(logging.ERROR) == logging.ERROR
    assert resolve_log_level(None) == logging.INFO
    assert resolve_log_level("chatty") == logging.INFO


# ============== 脱敏 ==============

@pytest.mark.parametrize("text,expected", [
    ("Authorization: Bearer abc.def.ghi", "Authorization: Bearer ***"),
    ("{'username': 'kinjal', 'password': '123456'}", "{'username': 'kinjal', 'password': '***'}"),
    ('{"password":"hunter2"}', '{"password":"***"}'),
    ("password=hunter2 user=kinjal", "password=*** user=kinjal"),
    ("JWT_SECRET=abc", "JWT_SECRET=***"),
    ("GET /user -> 401 (1.20ms)", "GET /user -> 401 (1.20ms)"),
])
def test_redact(text, expected):
    assert redact(text) == expected


def test_redact_bare_token(secret):
    token = TokenIssuer(secret).issue(4)
    assert token not in redact(f"issued {token} for user 4")


def test_filter_rewrites_formatted_message():
    record = _record("login with %s", {"password": "123456"})
    assert RedactingFilter().filter(record) is True
    assert "123456" not in record.getMessage()
    assert record.args == ()


def test_filter_leaves_clean_records_untouched():
    record = _record("user %s logged in", "kinjal")
    RedactingFilter().filter(record)
    assert record.args == ("kinjal",)


def test_project_logger_never_emits_tokens(secret, caplog):
    logger = get_logger("bearer_gate.redaction")
    token = TokenIssuer(secret).issue(4)
    with caplog.at_level(logging.INFO, logger="bearer_gate.redaction"):
        logger.info(f"Authorization: Bearer {token}")
    assert token not in caplog.text
    assert "Bearer ***" in caplog.text
