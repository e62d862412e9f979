import json
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from loguru import logger

from fastqueue.config import GeneralSettings, Settings
from fastqueue.logging_config import setup_logging, setup_logging_from_settings
from fastqueue.ringbuffer import RingBuffer


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    """Puts Loguru back to a single stderr sink and re-silences the package."""
    yield
    logger.remove()
    logger.add(sys.stderr)
    logger.disable("fastqueue")


def _read_records(log_dir: Path) -> list[dict]:
    files = list(log_dir.glob("fastqueue_*.log"))
    assert len(files) == 1
    lines = files[0].read_text(encoding="utf-8").splitlines()
    return [json.loads(line) for line in lines if line]


def test_file_sink_writes_json(tmp_path: Path) -> None:
    """Tests that the file sink emits one JSON object per record."""
    setup_logging(console_level="ERROR", log_dir=tmp_path, enqueue=False)
    logger.bind(capacity=3).info("hello from the test")
    logger.remove()

    records = _read_records(tmp_path)
    record = next(r for r in records if r["message"] == "hello from the test")
    assert record["level"] == "INFO"
    assert record["extra"] == {"capacity": 3}
    assert record["source"]["function"] == "test_file_sink_writes_json"


def test_stdlib_logging_is_intercepted(tmp_path: Path) -> None:
    setup_logging(console_level="ERROR", log_dir=tmp_path, enqueue=False)
    logging.getLogger("some.library").warning("from stdlib")
    logger.remove()

    messages = [r["message"] for r in _read_records(tmp_path)]
    assert "from stdlib" in messages


def test_buffer_lifecycle_is_logged(tmp_path: Path) -> None:
    """Tests that buffer construction and a repeated close reach the file sink."""
    setup_logging(
        console_level="ERROR", file_level="DEBUG", log_dir=tmp_path, enqueue=False
    )
    buf = RingBuffer[int](2)
    buf.close()
    buf.close()
    logger.remove()

    records = _read_records(tmp_path)
    levels = {r["message"]: r["level"] for r in records}
    assert levels["RingBuffer created with capacity 2."] == "DEBUG"
    assert levels["RingBuffer is already closed."] == "WARNING"


def test_package_logger_is_silent_until_setup() -> None:
    """Tests that importing the package does not emit buffer logs."""
    messages: list[str] = []
    logger.add(messages.append, level="DEBUG", format="{message}")

    buf = RingBuffer[int](2)
    buf.close()
    buf.close()

    assert messages == []


def test_setup_from_settings_applies_levels(tmp_path: Path) -> None:
    """Tests that the configured file level decides what reaches the file sink."""
    settings = Settings(
        general=GeneralSettings(
            log_level_console="ERROR",
            log_level_file="WARNING",
            log_directory=str(tmp_path),
        )
    )
    setup_logging_from_settings(settings, enqueue=False)
    buf = RingBuffer[int](2)
    buf.close()
    buf.close()
    logger.remove()

    messages = [r["message"] for r in _read_records(tmp_path)]
    assert messages == ["RingBuffer is already closed."]


def test_setup_from_settings_without_directory(tmp_path: Path) -> None:
    settings = Settings(
        general=GeneralSettings(log_level_console="ERROR", log_directory="")
    )
    setup_logging_from_settings(settings, enqueue=False)
    logger.remove()

    assert list(tmp_path.iterdir()) == []
