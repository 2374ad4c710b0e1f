"""Logging for bundlegen.

Records on the ``bundlegen`` logger tree are forwarded to the active
reporter, so log lines and stage progress end up in the same stream and
format.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from .reporting import get_reporter, stage

__all__ = ["get_logger", "configure_logging", "section", "step"]

ROOT_LOGGER = "bundlegen"


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


class _ToReporter(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
        except Exception:
            self.handleError(record)
            return
        rep = get_reporter()
        if record.levelno >= logging.ERROR:
            rep.fail(message)
        elif record.levelno >= logging.WARNING:
            rep.warn(message)
        elif record.levelno >= logging.INFO:
            rep.info(message)
        else:
            rep.detail(message)


def configure_logging(verbosity: int = 0) -> logging.Logger:
    """Attach the reporter handler; ``-v`` enables debug records."""
    logger = get_logger()
    logger.handlers[:] = [_ToReporter()]
    logger.setLevel(logging.DEBUG if verbosity > 0 else logging.INFO)
    logger.propagate = False
    return logger


def step(message: str) -> None:
    get_logger().info("%s", message)


@contextmanager
def section(title: str) -> Iterator[None]:
    """Report the body as an uncounted stage headed by ``title``."""
    with stage(f"section.{title.lower().replace(' ', '_')}", title):
        yield
