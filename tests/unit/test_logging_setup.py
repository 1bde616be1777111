import os
import logging
from logging.handlers import RotatingFileHandler

import pytest
from barometer_service.logging_setup import setup_logging


@pytest.fixture(autouse=True)
def clean_root_handlers():
    """Remove all root logger handlers before and after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    root.handlers.clear()
    yield
    for handler in root.handlers:
        if handler not in original_handlers:
            handler.close()
    root.handlers.clear()
    root.handlers.extend(original_handlers)
    root.setLevel(original_level)


def _file_handlers(logger, path=None):
    return [
        h for h in logger.handlers
        if isinstance(h, RotatingFileHandler) and (path is None or h.baseFilename == str(path))
    ]


def _console_handlers(logger):
    return [h for h in logger.handlers if type(h) is logging.StreamHandler]


def test_creates_log_directory(tmp_path):
    log_dir = str(tmp_path / "logs")
    setup_logging(log_dir=log_dir, log_file_name="test.log")
    assert os.path.isdir(log_dir)


def test_returns_root_logger(tmp_path):
    result = setup_logging(log_dir=str(tmp_path), log_file_name="test.log")
    assert result is logging.getLogger()


def test_log_level_is_set(tmp_path):
    setup_logging(log_dir=str(tmp_path), log_file_name="test.log", log_level="DEBUG")
    assert logging.getLogger().level == logging.DEBUG


def test_handlers_are_added(tmp_path):
    root = setup_logging(log_dir=str(tmp_path), log_file_name="test.log")

    assert len(_file_handlers(root, tmp_path / "test.log")) == 1
    assert len(_console_handlers(root)) == 1


def test_does_not_add_duplicate_handlers(tmp_path):
    setup_logging(log_dir=str(tmp_path), log_file_name="test.log")
    root = setup_logging(log_dir=str(tmp_path), log_file_name="test.log")

    assert len(_file_handlers(root)) == 1
    assert len(_console_handlers(root)) == 1


def test_foreign_handler_does_not_block_setup(tmp_path):
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)

    setup_logging(log_dir=str(tmp_path), log_file_name="baro.log")

    assert foreign in root.handlers
    assert len(_file_handlers(root, tmp_path / "baro.log")) == 1


def test_second_call_updates_level(tmp_path):
    setup_logging(log_dir=str(tmp_path), log_file_name="test.log", log_level="INFO")
    setup_logging(log_dir=str(tmp_path), log_file_name="test.log", log_level="WARNING")
    assert logging.getLogger().level == logging.WARNING


def test_log_file_is_written(tmp_path):
    logger = setup_logging(log_dir=str(tmp_path), log_file_name="baro.log")
    logger.warning("sentence send failed")
    for handler in _file_handlers(logger):
        handler.flush()
    assert "sentence send failed" in (tmp_path / "baro.log").read_text()
