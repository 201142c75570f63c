"""Centralized logging configuration."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_CONSOLE_HANDLER = "jobsync-console"
_FILE_HANDLER = "jobsync-file"
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; configures root handlers on first call."""
    global _configured
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


def configure_logging(level_name: str | None = None, log_dir: Path | None = None) -> None:
    """Set the level and install the console and, with ``log_dir``, the dated file handler.

    Safe to call again: later calls update the level and move the file
    handler to the new directory instead of stacking handlers.
    """
    global _configured
    _configured = True

    level_name = (level_name or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    handlers = {handler.get_name(): handler for handler in root.handlers}

    console = handlers.get(_CONSOLE_HANDLER)
    if console is None and not root.handlers:
        console = logging.StreamHandler(sys.stdout)
        console.set_name(_CONSOLE_HANDLER)
        console.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
        root.addHandler(console)
    if console is not None:
        console.setLevel(level)

    if log_dir is None:
        return
    log_file = Path(log_dir) / f"jobsync_{datetime.now().strftime('%Y-%m-%d')}.log"
    current = handlers.get(_FILE_HANDLER)
    if current is not None:
        if current.baseFilename == os.path.abspath(log_file):
            return
        root.removeHandler(current)
        current.close()
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.set_name(_FILE_HANDLER)
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
        root.addHandler(fh)
    except OSError as exc:
        root.warning("File logging disabled: %s", exc)
