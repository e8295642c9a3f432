"""Tests for logging setup and secret sanitization."""

import logging
from unittest.mock import MagicMock

import structlog

from cmdclient.logging_config import LOGGER_PREFIX, SUBSYSTEMS, sanitize_secrets, setup_logging

FAKE_TOKEN = "MTIzNDU2Nzg5MDEyMzQ1Njc4.GaBcDe.abcdefghijklmnopqrstuvwxyz0123"


def test_sanitize_scrubs_tokens_in_nested_values():
    event = {
        "event": "login",
        "token": FAKE_TOKEN,
        "headers": {"Authorization": "Bot abcdefghijklmnopqrstuvwxyz"},
        "args": [FAKE_TOKEN, 3],
    }
    result = sanitize_secrets(None, "info", event)
    assert FAKE_TOKEN not in result["token"]
    assert "REDACTED" in result["headers"]["Authorization"]
    assert "REDACTED" in result["args"][0]
    assert result["args"][1] == 3
    assert result["event"] == "login"


def test_setup_logging_creates_subsystem_files(tmp_path):
    config = MagicMock()
    config.log_dir = tmp_path / "logs"
    config.logging_level = "info"
    config.logging_subsystem_levels = {"router": "debug"}
    config.logging_max_file_size_mb = 1
    config.logging_backup_count = 1

    try:
        setup_logging(config)
        assert logging.getLogger(f"{LOGGER_PREFIX}.router").level == logging.DEBUG
        assert logging.getLogger(f"{LOGGER_PREFIX}.registry").level == logging.INFO
        for subsystem in SUBSYSTEMS:
            assert (tmp_path / "logs" / f"{subsystem}.log").exists()
        assert (tmp_path / "logs" / f"{LOGGER_PREFIX}.log").exists()
    finally:
        for name in (LOGGER_PREFIX, *(f"{LOGGER_PREFIX}.{s}" for s in SUBSYSTEMS)):
            for handler in logging.getLogger(name).handlers:
                handler.close()
            logging.getLogger(name).handlers.clear()
        structlog.reset_defaults()
