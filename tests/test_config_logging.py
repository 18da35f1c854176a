# tests/test_config_logging.py

import importlib
import logging

from fletes import config, create_app
from fletes.config import TestConfig
from fletes.utils.strings import like_pattern


def test_log_level_from_app_config():
    root = logging.getLogger()
    previous = root.level

    class DebugConfig(TestConfig):
        LOG_LEVEL = "DEBUG"

    try:
        create_app(DebugConfig)
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(previous)


def test_max_content_length_from_env(monkeypatch):
    monkeypatch.setenv("MAX_CONTENT_LENGTH", "1048576")
    try:
        reloaded = importlib.reload(config)
        assert reloaded.Config.MAX_CONTENT_LENGTH == 1048576
    finally:
        monkeypatch.delenv("MAX_CONTENT_LENGTH")
        importlib.reload(config)


def test_like_pattern_escapes_wildcards():
    assert like_pattern("LF_1") == "%LF\\_1%"
    assert like_pattern("100%") == "%100\\%%"
    assert like_pattern("a\\b") == "%a\\\\b%"
