"""Tests for logger.py — loguru sink setup."""

from __future__ import annotations

import sys

import pytest
from loguru import logger

from package_pricing.engine.parser import parse_csv_text
from package_pricing.logger import setup_logger


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_file_sink_receives_engine_logs(tmp_path, restore_logger, benidorm_csv: str):
    log_file = tmp_path / "logs" / "engine.log"
    setup_logger(level="DEBUG", log_file=str(log_file))
    parse_csv_text(benidorm_csv)
    logger.remove()  # closes the file sink

    text = log_file.read_text(encoding="utf-8")
    assert "Logger initialized with level=DEBUG" in text
    assert "Parsed pricing table: 2 tiers, 2 durations, 3 periods, 11 cells, 0 issues" in text


def test_level_filters(tmp_path, restore_logger, benidorm_csv: str):
    log_file = tmp_path / "engine.log"
    setup_logger(level="WARNING", log_file=str(log_file))
    parse_csv_text(benidorm_csv)
    logger.remove()

    assert "Parsed pricing table" not in log_file.read_text(encoding="utf-8")
