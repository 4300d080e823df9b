"""
Logging configuration for quantummesh.

Everything logs under the ``quantummesh`` logger hierarchy. The CLI sets it
up once from a :class:`~quantummesh.config.Config`, with command-line flags
taking precedence over the ``logging`` section. Records can carry simulation
context (``num_qubits``, ``strategy``, ``gate``) through ``extra=``; the JSON
formatter emits those fields and the run name from ``config.metadata``.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union
import json
from datetime import datetime, timezone


ROOT_LOGGER = "quantummesh"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Attributes a record may carry via ``extra=`` that end up in JSON output
CONTEXT_FIELDS = ("run_name", "num_qubits", "strategy", "gate")


class RunContextFilter(logging.Filter):
    """Stamp every record with the run name of the active configuration."""

    def __init__(self, run_name: Optional[str]):
        super().__init__()
        self.run_name = run_name

    def filter(self, record: logging.LogRecord) -> bool:
        if self.run_name is not None and not hasattr(record, "run_name"):
            record.run_name = self.run_name
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, including the emitting worker thread."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return StructuredFormatter()
    return logging.Formatter(fmt=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logger(
    name: str = ROOT_LOGGER,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Path] = None,
    json_format: bool = False,
    run_name: Optional[str] = None,
) -> logging.Logger:
    """
    Set up and configure a logger.

    Calling it again for the same name only updates the level, so repeated
    CLI invocations in one process do not stack handlers.

    Args:
        name: Logger name (default: "quantummesh")
        level: Logging level, as a number or a level name
        log_file: Optional file path mirroring the console output
        json_format: Use JSON-structured records
        run_name: Attached to every record as ``run_name``
    """
    level = _resolve_level(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    context = RunContextFilter(run_name)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(_make_formatter(json_format))
        handler.addFilter(context)
        logger.addHandler(handler)

    return logger


def configure_logging(
    config,
    level: Optional[Union[int, str]] = None,
    log_file: Optional[Path] = None,
    json_format: Optional[bool] = None,
) -> logging.Logger:
    """
    Configure the ``quantummesh`` logger from a Config.

    Explicit arguments override ``config.logging``; ``None`` means "use the
    config value".
    """
    settings = config.logging
    run_name = config.metadata.get("run_name")
    return setup_logger(
        name=ROOT_LOGGER,
        level=level if level is not None else settings.level,
        log_file=log_file if log_file is not None else settings.log_file,
        json_format=json_format if json_format is not None else settings.json_format,
        run_name=str(run_name) if run_name is not None else None,
    )


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Return ``name``, configuring it with defaults if it has no handlers."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        setup_logger(name)
    return logger
