"""
Logging service for Captioner.

Console output is always on. A per-day log file is added under
~/.local/share/captioner/logs/ unless disabled or the folder is not writable.
Editor modules only call get_logger(); the handlers are installed once by
setup_logging() at application start.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Optional


DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "captioner" / "logs"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Handlers installed by setup_logging(), so a second call is a no-op
_installed_handlers: list = []


def log_file_path(log_dir: Optional[Path] = None, day: Optional[date] = None) -> Path:
    """Path of the log file for a given day (today by default)."""
    day = day or date.today()
    return Path(log_dir or DEFAULT_LOG_DIR) / f"captioner_{day:%Y%m%d}.log"


def _attach(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    root.addHandler(handler)
    _installed_handlers.append(handler)


def setup_logging(
    log_level: int = logging.INFO,
    log_to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> Optional[Path]:
    """
    Install the console and file handlers on the root logger.

    Args:
        log_level: Level for the root logger and both handlers.
        log_to_file: Whether to also write the dated log file.
        log_dir: Folder for the log file. Defaults to DEFAULT_LOG_DIR.

    Returns:
        The log file path, or None when only the console is used.
    """
    root = logging.getLogger()
    if _installed_handlers:
        return next(
            (Path(h.baseFilename) for h in _installed_handlers
             if isinstance(h, logging.FileHandler)),
            None,
        )

    root.setLevel(log_level)
    console = logging.StreamHandler()
    _attach(root, console, log_level)

    if not log_to_file:
        return None

    path = log_file_path(log_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        _attach(root, logging.FileHandler(path, encoding="utf-8"), log_level)
    except OSError as e:
        root.warning(f"Could not open log file {path}: {e}. Logging to console only.")
        return None
    return path


def shutdown_logging() -> None:
    """Remove and close the handlers installed by setup_logging()."""
    root = logging.getLogger()
    while _installed_handlers:
        handler = _installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()


def get_logger(name: str) -> logging.Logger:
    """Logger for a module; pass __name__."""
    return logging.getLogger(name)
