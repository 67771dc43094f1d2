"""Logging configuration using Loguru.

Every record carries a ``session`` field: ``-`` for process-level
messages, the voice chat session id for anything logged through
``session_logger``. Conversation text only reaches the logs through
``preview``.
"""

import sys
from pathlib import Path

from loguru import logger

PREVIEW_CHARS = 50
NO_SESSION = "-"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[session]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def setup_logging(
    level: str = "INFO",
    log_dir: str = "logs",
    enable_file: bool = True,
) -> None:
    """Configure application logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files
        enable_file: Write JSON lines and an error log under log_dir
    """
    logger.remove()
    logger.configure(extra={"session": NO_SESSION})

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=not enable_file,
    )

    if enable_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # One JSON object per line, session id included, for log shipping
        logger.add(
            log_path / "agentvox_{time:YYYY-MM-DD}.jsonl",
            level=level,
            serialize=True,
            rotation="100 MB",
            retention="30 days",
            compression="gz",
            diagnose=False,
        )

        logger.add(
            log_path / "errors_{time:YYYY-MM-DD}.log",
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | {extra[session]} | "
                "{name}:{function}:{line} | {message}\n{exception}"
            ),
            level="ERROR",
            rotation="50 MB",
            retention="90 days",
            compression="gz",
            backtrace=True,
            diagnose=False,
        )

    logger.info(f"Logging initialized at {level} level")


def get_logger(name: str) -> "logger":
    """Get a logger instance with the given name.

    Usage:
        from agentvox.logging_config import get_logger
        logger = get_logger(__name__)
        logger.info("Message")
    """
    return logger.bind(name=name, session=NO_SESSION)


def session_logger(base: "logger", session_id: str) -> "logger":
    """Bind a module logger to one voice chat session."""
    return base.bind(session=session_id)


def preview(text: str | None, limit: int = PREVIEW_CHARS) -> str:
    """Shorten conversation text for logging: 'hello there...'."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."
