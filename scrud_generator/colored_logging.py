"""
Colored console logging for the SCRUD generator.

Log levels get their own colors; INFO and DEBUG messages are additionally
colored by what they report (success, progress, highlights, section headers).
"""

import logging
import sys
from typing import Optional, Tuple


class ColoredFormatter(logging.Formatter):
    """Logging formatter adding ANSI color codes when writing to a TTY."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }

    SUCCESS = '\033[92m'          # Bright Green
    PROGRESS = '\033[94m'         # Bright Blue
    HIGHLIGHT = '\033[96m'        # Bright Cyan
    RESET = '\033[0m'
    BOLD = '\033[1m'

    SUCCESS_INDICATORS: Tuple[str, ...] = ('✓', 'completed', 'successfully', 'generated', 'written')
    PROGRESS_INDICATORS: Tuple[str, ...] = ('→', 'resolving', 'building', 'emitting', 'loading', 'discovering')
    HIGHLIGHT_INDICATORS: Tuple[str, ...] = ('•', 'skipping', 'skipped', 'suppressed', 'found', 'excluded')

    def __init__(self, fmt: Optional[str] = None, use_colors: bool = True):
        if fmt is None:
            fmt = "%(levelname)s: %(message)s"
        super().__init__(fmt)

        # Disable colors if not in a TTY or explicitly disabled
        self.use_colors = use_colors and hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted_message = super().format(record)
        if not self.use_colors:
            return formatted_message

        color = self._color_for(record)
        if not color:
            return formatted_message
        return f"{color}{formatted_message}{self.RESET}"

    def _color_for(self, record: logging.LogRecord) -> str:
        # Errors and warnings keep their level color whatever they say
        if record.levelno >= logging.WARNING:
            return self.COLORS.get(record.levelname, '')

        message = record.getMessage().lower()
        if self._is_section_message(message):
            return self.BOLD + self.HIGHLIGHT
        if any(indicator in message for indicator in self.SUCCESS_INDICATORS):
            return self.SUCCESS + self.BOLD
        if any(indicator in message for indicator in self.PROGRESS_INDICATORS):
            return self.PROGRESS
        if any(indicator in message for indicator in self.HIGHLIGHT_INDICATORS):
            return self.HIGHLIGHT
        if record.levelname == 'DEBUG':
            return self.COLORS['DEBUG']
        return ''

    @staticmethod
    def _is_section_message(message: str) -> bool:
        return '=' * 20 in message


def setup_colored_logging(level: int = logging.INFO, use_colors: bool = True) -> None:
    """
    Set up colored logging on the root logger.

    Args:
        level: Logging level (default: INFO)
        use_colors: Whether to use colors (default: True)
    """
    formatter = ColoredFormatter(use_colors=use_colors)

    root_logger = logging.getLogger()

    # Remove existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)


def get_colored_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


# Convenience functions for special message types
def log_success(logger: logging.Logger, message: str) -> None:
    logger.info(f"✓ {message}")


def log_progress(logger: logging.Logger, message: str) -> None:
    logger.info(f"→ {message}")


def log_highlight(logger: logging.Logger, message: str) -> None:
    logger.info(f"• {message}")


def log_section(logger: logging.Logger, section_name: str) -> None:
    """Log a section header."""
    separator = "=" * 60
    logger.info(separator)
    logger.info(f"  {section_name.upper()}")
    logger.info(separator)
