"""Logging for the pipeline: one "jobpipe" logger tree, console plus a daily file."""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

PACKAGE_LOGGER = "jobpipe"

_LOG_DIR = Path(os.environ.get("JOBPIPE_LOG_DIR", Path(__file__).resolve().parent.parent / "logs"))
# Sources run on worker threads, so the thread name tells them apart.
_FORMAT = "%(asctime)s  %(levelname)-8s  [%(threadName)s]  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_NOISY = ("urllib3", "httpx", "openai")
_configured = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package tree; handlers are installed once."""
    global _configured
    if not _configured:
        _install_handlers(os.environ.get("LOG_LEVEL", "INFO"))
        _configured = True
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def set_level(level: str | int) -> None:
    """Change the console level at runtime (the file handler stays at DEBUG)."""
    pkg = logging.getLogger(PACKAGE_LOGGER)
    resolved = _resolve(level)
    pkg.setLevel(min(resolved, logging.DEBUG) if _file_handler(pkg) else resolved)
    for handler in pkg.handlers:
        if not isinstance(handler, logging.FileHandler):
            handler.setLevel(resolved)


def _resolve(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _file_handler(pkg: logging.Logger) -> logging.FileHandler | None:
    for handler in pkg.handlers:
        if isinstance(handler, logging.FileHandler):
            return handler
    return None


def _install_handlers(level_name: str) -> None:
    level = _resolve(level_name)
    pkg = logging.getLogger(PACKAGE_LOGGER)
    if pkg.handlers:
        return
    pkg.propagate = False
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    pkg.addHandler(console)
    pkg.setLevel(level)

    for noisy in _NOISY:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if os.environ.get("LOG_TO_FILE", "true").lower() not in ("1", "true", "yes"):
        return
    try:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = _LOG_DIR / f"jobpipe_{datetime.now().strftime('%Y-%m-%d')}.log"
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        pkg.addHandler(fh)
        pkg.setLevel(logging.DEBUG)
    except OSError as exc:
        pkg.warning("File logging disabled (%s)", exc)
