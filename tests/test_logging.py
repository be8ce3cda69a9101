"""Tests for structured logging."""

import json
import logging
from pathlib import Path

from randomfield.core.logging import get_logger, setup_logging
from randomfield.generator import UniformGridRandomFieldGenerator


def test_json_log_records_cache_miss(spec_2d, tmp_path: Path):
    """Generator events land in the JSON lines file with their data fields."""
    log_path = tmp_path / "logs" / "run.jsonl"
    setup_logging(log_path, level=logging.DEBUG)
    try:
        UniformGridRandomFieldGenerator(spec_2d, tmp_path)
    finally:
        for handler in logging.getLogger("randomfield").handlers:
            handler.close()
        logging.getLogger("randomfield").handlers.clear()

    records = [json.loads(line) for line in log_path.read_text().splitlines()]
    miss = [r for r in records if r["message"] == "No cached spectral basis"]
    assert len(miss) == 1
    assert miss[0]["level"] == "INFO"
    assert miss[0]["path"].endswith(".rfg")



def test_structured_logger_without_data(caplog):
    logger = get_logger("randomfield.test")
    with caplog.at_level(logging.INFO, logger="randomfield.test"):
        logger.info("plain message")
    assert "plain message" in caplog.text
