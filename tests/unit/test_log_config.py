"""Unit tests for logging setup."""

import logging

from coursedesk.config import get_settings
from coursedesk.log_config import _parse_level, setup_logging


def test_category_levels_applied(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL_HTTP", "ERROR")
    monkeypatch.setenv("LOG_LEVEL_API", "DEBUG")
    root = logging.getLogger()
    root_level = root.level
    get_settings.cache_clear()
    try:
        setup_logging()
        assert logging.getLogger("httpx").level == logging.ERROR
        assert logging.getLogger("httpcore").level == logging.ERROR
        assert logging.getLogger("coursedesk.api_client").level == logging.DEBUG
    finally:
        root.setLevel(root_level)
        get_settings.cache_clear()


def test_parse_level_defaults_to_info():
    assert _parse_level("warning") == logging.WARNING
    assert _parse_level("chatty") == logging.INFO
