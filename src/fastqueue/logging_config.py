import json
import logging
import sys
from pathlib import Path
from typing import Any, cast

from loguru import logger
from loguru._defaults import LOGURU_FORMAT

from fastqueue.config import Settings


class InterceptHandler(logging.Handler):
    """A custom logging handler to intercept standard logging messages.

    This handler redirects standard logging messages to Loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Emits a log record to the Loguru logger.

        Args:
            record: The log record to emit.
        """
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = cast(Any, frame.f_back)
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _json_formatter(record: dict[str, Any]) -> str:
    """Structures a log record as a single JSON line.

    Loguru treats the returned string as a format template, so the JSON is
    stashed in ``extra`` and referenced from the template.
    """
    log_object = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "source": {
            "name": record["name"],
            "file": f"{record['file'].name}:{record['line']}",
            "function": record["function"],
        },
        "extra": {k: v for k, v in record["extra"].items() if k != "serialized"},
    }
    record["extra"]["serialized"] = json.dumps(log_object, default=str)
    return "{extra[serialized]}\n"


def setup_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_dir: Path | None = None,
    *,
    enqueue: bool = True,
) -> None:
    """Configures the process-wide Loguru logger.

    This function removes any existing handlers, sets up a console sink with
    a readable format, and an optional daily-rotated file sink with structured
    JSON output. It also intercepts standard library logging and enables the
    `fastqueue` logger, which is disabled on import.

    Args:
        console_level: The minimum log level for console output.
        file_level: The minimum log level for file output.
        log_dir: Directory to store log files. If None, file logging is disabled.
        enqueue: Hand file writes to a background thread.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=console_level.upper(),
        format=LOGURU_FORMAT,
        colorize=True,
    )

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / "fastqueue_{time:YYYY-MM-DD}.log"),
            level=file_level.upper(),
            format=_json_formatter,
            rotation="00:00",  # New file at midnight
            retention="7 days",
            encoding="utf-8",
            enqueue=enqueue,
            backtrace=False,
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.enable("fastqueue")

    logger.info("Logging configured successfully.")


def setup_logging_from_settings(
    settings: Settings | None = None, *, enqueue: bool = True
) -> None:
    """Configures logging from the ``[general]`` section of the settings.

    An empty ``log_directory`` disables the file sink.

    Args:
        settings: Settings to apply. Defaults to `Settings.get_instance()`.
        enqueue: Hand file writes to a background thread.
    """
    general = (settings or Settings.get_instance()).general
    log_dir = (
        Path(general.log_directory).expanduser() if general.log_directory else None
    )
    setup_logging(
        console_level=general.log_level_console,
        file_level=general.log_level_file,
        log_dir=log_dir,
        enqueue=enqueue,
    )
