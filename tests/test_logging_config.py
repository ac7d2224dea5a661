"""Tests for configs/logging_config.py - logger hierarchy and the log file handler."""
from __future__ import annotations

import logging

import pytest

import configs.logging_config as logging_config
from configs.logging_config import get_logger
from configs.logging_config import LOG_FILE_ENV
from configs.logging_config import setup_logging


@pytest.fixture
def fresh_logging(monkeypatch):
    """Let setup_logging run again, then put the test configuration back."""
    root = logging.getLogger(logging_config.ROOT_LOGGER_NAME)
    saved_handlers = list(root.handlers)
    saved_level = root.level
    monkeypatch.setattr(logging_config, '_logging_configured', False)
    yield root
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestLogging:
    def test_logger_names(self):
        assert get_logger('backend.mechanism_api').name == 'dyad_tools.backend.mechanism_api'
        assert get_logger('dyad_tools.kinematic').name == 'dyad_tools.kinematic'

    def test_file_from_environment(self, fresh_logging, tmp_path, monkeypatch):
        """A worker process that only auto-configures still writes the server log file."""
        log_file = tmp_path / 'backend.log'
        monkeypatch.setenv(LOG_FILE_ENV, str(log_file))
        monkeypatch.setenv('LOG_LEVEL', 'INFO')

        get_logger('backend.mechanism_api').info('mechanism saved')

        for handler in fresh_logging.handlers:
            handler.flush()
        assert 'mechanism saved' in log_file.read_text()
        assert fresh_logging.level == logging.INFO

    def test_no_file_by_default(self, fresh_logging, monkeypatch):
        monkeypatch.delenv(LOG_FILE_ENV, raising=False)
        setup_logging(level='warning')
        assert not any(isinstance(h, logging.FileHandler) for h in fresh_logging.handlers)
        assert fresh_logging.level == logging.WARNING
