"""
Console and file logging for migration runs.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

RESET = '\033[0m'

# level -> (ANSI color, symbol)
LEVEL_STYLES = {
    logging.DEBUG: ('\033[36m', '·'),
    logging.INFO: ('\033[32m', '›'),
    logging.WARNING: ('\033[33m', '⚠'),
    logging.ERROR: ('\033[31m', '✗'),
    logging.CRITICAL: ('\033[35m', '!'),
}

PLAIN_FORMAT = '%(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Loggers of libraries that only matter when something is wrong
QUIET_LOGGERS = ('psycopg2',)


class ColoredFormatter(logging.Formatter):
    """Terminal formatter: colored level symbol and name, then the message."""

    def __init__(self, level_width: int = 10):
        super().__init__('%(message)s')
        self.level_width = level_width

    def format(self, record: logging.LogRecord) -> str:
        color, symbol = LEVEL_STYLES.get(record.levelno, (RESET, ''))
        label = f"{symbol} {record.levelname}".ljust(self.level_width)
        return f"{color}{label}{RESET} {super().format(record)}"


def _console_handler(level: int, use_colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if use_colors and sys.stdout.isatty():
        handler.setFormatter(ColoredFormatter())
    else:
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    return handler


def _file_handler(log_file: str, level: int, format_string: Optional[str]) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding='utf-8')
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(format_string or FILE_FORMAT))
    return handler


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    use_colors: bool = True
):
    """
    Route log records to stdout and, optionally, a timestamped log file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path of a log file to append to
        format_string: Format of file records
        use_colors: Color console output when stdout is a terminal
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers = [_console_handler(numeric_level, use_colors)]
    if log_file:
        handlers.append(_file_handler(log_file, numeric_level, format_string))

    logging.basicConfig(level=numeric_level, handlers=handlers, force=True)
    logging.getLogger('portmigrate').setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
