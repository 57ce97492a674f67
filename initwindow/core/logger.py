# initwindow/core/logger.py

"""
Application log for InitWindow.

setup_logging() is called once by main.py and configures the "initwindow"
logger: initwindow.log in the data directory plus the console. Engine
components log through children of it (initwindow.Discovery,
initwindow.Launcher, ...), either passed in as `logger=` or via get_logger().
"""

import logging
from pathlib import Path


def setup_logging(log_dir: Path | None = None) -> logging.Logger:
    """
    Configure the application logger and return it.

    Calling it again returns the same logger without adding handlers, so
    a second window or a test harness does not duplicate every line.
    """
    if log_dir is None:
        log_dir = Path(__file__).resolve().parents[2] / "logs"

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "initwindow.log"

    logger = logging.getLogger("initwindow")
    logger.setLevel(logging.INFO)
    if logger.handlers:
        return logger

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in (logging.FileHandler(log_file, encoding="utf-8"), logging.StreamHandler()):
        handler.setFormatter(fmt)
        handler.setLevel(logging.INFO)
        logger.addHandler(handler)

    logger.info(f"Logging to {log_file}")
    return logger


def get_logger(component: str) -> logging.Logger:
    """Child of the application logger, e.g. ``initwindow.Discovery``."""
    return logging.getLogger(f"initwindow.{component}")
