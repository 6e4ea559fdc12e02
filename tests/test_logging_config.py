"""Tests for structured JSON logging."""

import json
import logging

import pytest

from content_extractor.logging_config import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, root.handlers[:]
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_output_with_extra_fields(capsys):
    configure_logging("debug")
    logging.getLogger("content_extractor.extraction.chain").info(
        "Strategy attempt", extra={"strategy": "transcript-api", "outcome": "failed"}
    )

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["severity"] == "INFO"
    assert record["logger"] == "content_extractor.extraction.chain"
    assert record["service"] == "content-extractor"
    assert record["strategy"] == "transcript-api"
    assert record["outcome"] == "failed"
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
