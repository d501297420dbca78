"""
Tests for logging helpers in tako.logging.
"""

import logging

import pytest
import structlog

from tako.logging import logging_context, setup_logging


@pytest.fixture
def reset_structlog():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    logging.getLogger("tako").setLevel(logging.NOTSET)


def test_setup_logging_sets_level(reset_structlog):
    setup_logging(level=logging.INFO)

    assert logging.getLogger("tako").level == logging.INFO
    assert structlog.is_configured()


def test_logging_context_binds_missing_keys(reset_structlog):
    with logging_context(loader="users"):
        assert structlog.contextvars.get_contextvars() == {"loader": "users"}
    assert structlog.contextvars.get_contextvars() == {}


def test_logging_context_keeps_existing_binding(reset_structlog):
    with structlog.contextvars.bound_contextvars(loader="outer"):
        with logging_context(loader="inner", batch=1):
            assert structlog.contextvars.get_contextvars() == {"loader": "outer", "batch": 1}
        assert structlog.contextvars.get_contextvars() == {"loader": "outer"}
