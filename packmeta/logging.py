"""Logger hierarchy and handler setup for pack runs."""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT = "packmeta"
_CONSOLE_FORMAT = "[packmeta] %(levelname)s %(message)s"
_VERBOSE_CONSOLE_FORMAT = "[packmeta] %(levelname)s %(component)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``packmeta.<name>``, or the ``packmeta`` logger itself."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


class _ComponentFilter(logging.Filter):
    # Exposes the logger name without the packmeta prefix as %(component)s.
    def filter(self, record: logging.LogRecord) -> bool:
        prefix = f"{_ROOT}."
        record.component = record.name[len(prefix):] if record.name.startswith(prefix) else record.name
        return True


def configure_logging(
    *, verbose: bool = False, quiet: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Send packmeta records to stderr and, when ``log_file`` is set, to that file.

    ``verbose`` lowers the threshold to DEBUG and tags console lines with the
    emitting component; ``quiet`` raises the console threshold to WARNING. The
    file sink always records at the run's level.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_ROOT)
    logger.setLevel(level)
    logger.propagate = False

    # Calling twice in one process must not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(logging.WARNING if quiet and not verbose else level)
    console.addFilter(_ComponentFilter())
    console.setFormatter(logging.Formatter(_VERBOSE_CONSOLE_FORMAT if verbose else _CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(sink)

    return logger


__all__ = ["configure_logging", "get_logger"]
