"""Structured logging utilities."""

from __future__ import annotations

import logging
from pathlib import Path

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def resolve_level(level: int | str) -> int:
    """Accept either a logging constant or a level name such as ``"debug"``."""

    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def setup_structured_logging(
    log_dir: Path,
    *,
    log_file: str = "runner.log",
    level: int | str = logging.INFO,
    fmt: str | None = None,
) -> logging.Logger:
    """Send log records to both the console and ``log_dir / log_file``.

    Existing root handlers are replaced so repeated runs in one process do
    not duplicate output.
    """

    level = resolve_level(level)
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    formatter = logging.Formatter(fmt or DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    file_handler = logging.FileHandler(log_dir / log_file, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)
    root.addHandler(file_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    stream_handler.setLevel(level)
    root.addHandler(stream_handler)

    logger = logging.getLogger("runner")
    logger.setLevel(level)
    return logger
