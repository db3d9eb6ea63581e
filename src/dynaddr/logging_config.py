from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Optional


class SensitiveDataFilter(logging.Filter):
    """Filter to mask secrets that can show up in lookup URLs and headers."""

    PATTERNS = {
        "query_secret": r"([?&](?:token|key|apikey|api_key|secret|password)=)[^&\s]+",
        "userinfo": r"(https?://)[^/@\s:]+:[^/@\s]+@",
        "auth_header": r"(authorization\s*[=:]\s*)(?:bearer\s+)?\S+",
    }

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()

        message = re.sub(
            self.PATTERNS["query_secret"], r"\1[MASKED]", message, flags=re.IGNORECASE
        )
        message = re.sub(self.PATTERNS["userinfo"], r"\1[MASKED]@", message)
        message = re.sub(
            self.PATTERNS["auth_header"], r"\1[MASKED]", message, flags=re.IGNORECASE
        )

        record.msg = message
        record.args = None
        return True


class ColoredFormatter(logging.Formatter):
    """Formatter that adds ANSI colours for terminal output."""

    COLOURS = {
        logging.DEBUG: "\033[36m",  # Cyan
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        colour = self.COLOURS.get(record.levelno, "")
        if colour and sys.stderr.isatty():
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{colour}{record.levelname}{self.RESET}"
        return super().format(record)


def _resolve_level(level: str) -> int:
    """Convert string level names to logging constants."""
    value = getattr(logging, level.upper(), None)
    if isinstance(value, int):
        return value
    return logging.INFO


def setup_logging(
    level: str = "INFO",
    mask_sensitive: bool = True,
    *,
    log_file: Optional[str | Path] = None,
    use_color: Optional[bool] = None,
) -> None:
    """
    Configure logging for the ``dynaddr`` package.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        mask_sensitive: Mask secrets in lookup URLs and auth headers.
        log_file: Optional log file path; ``None`` disables file logging.
        use_color: Force colour output. Defaults to auto-detect (TTY only).
    """
    level_value = _resolve_level(level)
    fmt = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    colour_output = use_color if use_color is not None else sys.stderr.isatty()

    package_logger = logging.getLogger("dynaddr")
    package_logger.setLevel(level_value)
    package_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level_value)
    console_handler.setFormatter(ColoredFormatter(fmt) if colour_output else logging.Formatter(fmt))
    package_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level_value)
        file_handler.setFormatter(logging.Formatter(fmt))
        package_logger.addHandler(file_handler)

    if mask_sensitive:
        for handler in package_logger.handlers:
            if not any(isinstance(f, SensitiveDataFilter) for f in handler.filters):
                handler.addFilter(SensitiveDataFilter())

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
