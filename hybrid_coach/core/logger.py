"""Loguru setup shared by the API server and the CLI.

Records from stdlib loggers used by the server and the HTTP stack are routed
into loguru so everything ends up in the same sinks.
"""

import inspect
import logging
import sys
from collections.abc import Iterable
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {extra} - {message}"

INTERCEPTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "openai")


class InterceptHandler(logging.Handler):
    """Forward stdlib logging records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging internals so loguru reports the original call site
        frame, depth = inspect.currentframe(), 0
        while frame is not None and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def intercept_stdlib_loggers(names: Iterable[str] = INTERCEPTED_LOGGERS) -> None:
    handler = InterceptHandler()
    for name in names:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Replace loguru's default sink with the coach's console and file sinks.

    Args:
        level: Minimum level for both sinks
        log_file: Rotating log file; console only when None
        rotation: When to rotate the log file (e.g. "10 MB", "1 day")
        retention: How long rotated files are kept
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            encoding="utf-8",
            diagnose=False,
        )

    intercept_stdlib_loggers()
    logger.info("Logger initialized", log_level=level, log_file=log_file)
