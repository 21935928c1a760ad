import logging

import pytest
import structlog

from bindery.core.logging import (
    LoggerRegistry,
    _add_library_info,
    _censor_sensitive_keys,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    get_shared_processors,
    hydration_logger,
    meta_logger,
    unbind_context,
)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers = handlers
    root.setLevel(level)


def test_sensitive_keys_are_redacted():
    event = {
        "event": "hydrated",
        "password": "p",
        "payload": {"Token": "t", "name": "ada", "items": [{"secret": "s", "ok": 1}]},
    }
    assert _censor_sensitive_keys(None, "info", event) == {
        "event": "hydrated",
        "password": "[REDACTED]",
        "payload": {"Token": "[REDACTED]", "name": "ada", "items": [{"secret": "[REDACTED]", "ok": 1}]},
    }


def test_library_tag():
    assert _add_library_info(None, "info", {"event": "x"})["library"] == "bindery"


def test_shared_processors_redact():
    assert _censor_sensitive_keys in get_shared_processors()


def test_domain_loggers_are_registered_once():
    assert meta_logger() is LoggerRegistry.get("meta")
    assert hydration_logger() is hydration_logger()
    assert meta_logger() is not hydration_logger()


def test_context_binding():
    clear_context()
    bind_context(request_id="r1", tenant="acme")
    assert structlog.contextvars.get_contextvars() == {"request_id": "r1", "tenant": "acme"}
    unbind_context("tenant")
    assert structlog.contextvars.get_contextvars() == {"request_id": "r1"}
    clear_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_configure_logging(restore_logging):
    configure_logging(level="debug", json_logs=True)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    assert get_logger("bindery.test") is not None
