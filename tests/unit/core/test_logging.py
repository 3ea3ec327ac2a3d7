"""Tests for structured logging helpers."""

import structlog

from codeflow.core.config import Settings
from codeflow.core.logging import (
    LoggingContext,
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    rename_message_field,
)


def teardown_function():
    clear_context()
    structlog.reset_defaults()


def test_logging_context_binds_and_unbinds():
    with LoggingContext(user_id="alice", snippet_id="s1"):
        bound = structlog.contextvars.get_contextvars()
        assert bound["user_id"] == "alice"
        assert bound["snippet_id"] == "s1"

    assert "user_id" not in structlog.contextvars.get_contextvars()


def test_bind_correlation_id_generates_id():
    correlation_id = bind_correlation_id()

    assert correlation_id.startswith("cid_")
    assert structlog.contextvars.get_contextvars()["correlation_id"] == correlation_id


def test_bind_correlation_id_keeps_given_id():
    assert bind_correlation_id("abc123") == "abc123"
    assert structlog.contextvars.get_contextvars()["correlation_id"] == "abc123"


def test_rename_message_field():
    event = rename_message_field(None, "info", {"event": "Snippet saved", "x": 1})

    assert event == {"message": "Snippet saved", "x": 1}


def test_configure_logging_json(capsys):
    configure_logging(Settings(environment="production", log_format="json"))

    get_logger("codeflow.test").info("Snippet saved", snippet_id="s1")

    err = capsys.readouterr().err
    assert '"message": "Snippet saved"' in err
    assert '"snippet_id": "s1"' in err


def test_configure_logging_respects_level(capsys):
    configure_logging(Settings(environment="production", log_level="WARNING"))

    get_logger("codeflow.test").info("hidden")

    assert "hidden" not in capsys.readouterr().err
