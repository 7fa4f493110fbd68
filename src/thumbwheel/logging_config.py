"""
Logging Configuration
Sets up the 'thumbwheel' logger for the demo application.

The widget itself only creates module loggers; a host application that
embeds it configures logging its own way. The demo reads its settings from
the environment so the render loop can be traced without code changes:

    THUMBWHEEL_LOG_LEVEL=DEBUG python -m thumbwheel
    THUMBWHEEL_LOG_FILE=wheel.log python -m thumbwheel
"""
import logging
import os
import sys
from typing import Optional

LOG_LEVEL_ENV = "THUMBWHEEL_LOG_LEVEL"
LOG_FILE_ENV = "THUMBWHEEL_LOG_FILE"


def level_from_env(default: int = logging.INFO) -> int:
    """
    Resolve the level named in THUMBWHEEL_LOG_LEVEL. Accepts a level name
    (case-insensitive) or a number; anything else falls back to ``default``.
    """
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    if isinstance(level, int):
        return level
    # Logging is not set up yet, so warn on stderr
    print(f"Ignoring unknown {LOG_LEVEL_ENV}={raw!r}.", file=sys.stderr)
    return default


def setup_logging(level: Optional[int] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Configures the logger of the 'thumbwheel' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG). Defaults to the
            environment, then INFO.
        log_file: Optional path to save logs to. Defaults to the environment.
    """
    if level is None:
        level = level_from_env()
    if log_file is None:
        log_file = os.environ.get(LOG_FILE_ENV) or None

    logger = logging.getLogger("thumbwheel")
    logger.setLevel(level)
    # Records stop here; a host's root handlers would print them twice
    logger.propagate = False

    if logger.hasHandlers():
        logger.handlers.clear()

    # Thread name matters: most records come from the render threads
    formatter = logging.Formatter(
        '%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )

    # 1. Console Handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 2. File Handler (Optional)
    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info(f"Logging initialized at {logging.getLevelName(level)}.")
    return logger
