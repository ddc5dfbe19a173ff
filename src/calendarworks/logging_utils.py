"""Log set-up shared by the CalendarWorks command line tools.

A run writes everything at ``level`` to ``<log dir>/<name>.log`` and echoes
only warnings and errors to stderr, where they sit below the progress bar.
Worker threads are named by the batch driver, so the thread name is part of
every record.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional

__all__ = ["LOG_DIR_ENV", "configure_logging", "reset_logging", "resolve_log_directory"]

LOG_DIR_ENV = "CALENDARWORKS_LOG_DIR"

_LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(threadName)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MANAGED_ATTR = "_calendarworks_managed_handler"


def resolve_log_directory(log_dir: Optional[Path] = None) -> Path:
    """Pick the log directory: explicit argument, then $CALENDARWORKS_LOG_DIR,
    then ``logs/`` beside the checkout's pyproject.toml, then ``./logs``."""

    if log_dir:
        return Path(log_dir).expanduser()
    from_env = os.environ.get(LOG_DIR_ENV)
    if from_env:
        return Path(from_env).expanduser()
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").is_file():
            return parent / "logs"
    return Path.cwd() / "logs"


def _install(
    root: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    setattr(handler, _MANAGED_ATTR, True)
    root.addHandler(handler)


def reset_logging(logger: Optional[logging.Logger] = None) -> None:
    """Close and detach every handler :func:`configure_logging` installed."""

    target = logger or logging.getLogger()
    for handler in list(target.handlers):
        if getattr(handler, _MANAGED_ATTR, False):
            target.removeHandler(handler)
            handler.close()


def configure_logging(
    log_name: str,
    *,
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    include_console: bool = True,
    console_level: int = logging.WARNING,
) -> Path:
    """Route root logging to ``<log dir>/<log_name>.log`` and return that path.

    Calling it again replaces the handlers from the previous call. The console
    handler never reports below ``level``.
    """

    directory = resolve_log_directory(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / f"{log_name}.log"

    root = logging.getLogger()
    reset_logging(root)
    root.setLevel(level)

    formatter = logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT)
    _install(root, logging.FileHandler(log_path, encoding="utf-8"), level, formatter)
    if include_console:
        _install(
            root, logging.StreamHandler(sys.stderr), max(level, console_level), formatter
        )

    logging.captureWarnings(True)
    return log_path
