"""
Logging setup for the dicechain command line.

Library modules only ever call logging.getLogger(__name__); handlers are
installed here, once, by whoever runs the engine.
"""

import logging
import sys
from typing import Optional

from colorama import Back, Fore, Style, init

init(autoreset=True)

CONSOLE_FORMAT = '%(levelname)s %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'


class ColoredFormatter(logging.Formatter):
    """
    Colors the level name of each record.

    Rolls log at DEBUG (cyan), table loading at INFO (green), missing spell
    items and crit tables at WARNING (yellow) and unreadable data files at
    ERROR (red).
    """

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def format(self, record):
        levelname = record.levelname
        record.levelname = f"{self.COLORS.get(levelname, '')}{levelname}{Style.RESET_ALL}"
        try:
            return super().format(record)
        finally:
            # The record is shared with the file handler
            record.levelname = levelname


def _to_level(level: str) -> int:
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(
    level: str = 'INFO',
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    use_colors: bool = True
) -> logging.Logger:
    """
    Install console (and optionally file) handlers on the root logger.

    Console output goes to stderr so roll results on stdout stay parseable.
    The file handler always records DEBUG, uncolored.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also write every record to this file
        format_string: Overrides the console format
        use_colors: Color level names on the console

    Returns:
        The root logger

    Example:
        setup_logging(level='DEBUG', log_file='rolls.log')
    """
    root = logging.getLogger()
    root.handlers.clear()

    console_format = format_string or CONSOLE_FORMAT
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(_to_level(level))
    console.setFormatter(ColoredFormatter(console_format) if use_colors else logging.Formatter(console_format))
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(file_handler)
        root.setLevel(logging.DEBUG)
    else:
        root.setLevel(_to_level(level))

    return root


__all__ = ['ColoredFormatter', 'setup_logging']
