"""
Console logging for OpenHunt.
One shared logger with colored level tags; verbosity is switched globally.
"""

import logging
import sys

from colorama import init, Fore, Style

init(autoreset=True)


LEVEL_COLORS = {
    logging.DEBUG: Fore.WHITE,
    logging.INFO: Fore.CYAN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}

LEVEL_TAGS = {
    logging.DEBUG: "[*]",
    logging.INFO: "[+]",
    logging.WARNING: "[!]",
    logging.ERROR: "[-]",
    logging.CRITICAL: "[X]",
}


class ColoredFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno, "")
        tag = LEVEL_TAGS.get(record.levelno, "[?]")
        message = super().format(record)
        return f"{color}{tag}{Style.RESET_ALL} {message}"


def _build_logger() -> logging.Logger:
    log = logging.getLogger("openhunt")
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(ColoredFormatter("%(message)s"))
        log.addHandler(handler)
    log.setLevel(logging.INFO)
    log.propagate = False
    return log


logger = _build_logger()


def set_verbose(enabled: bool = True):
    logger.setLevel(logging.DEBUG if enabled else logging.INFO)


def set_silent(enabled: bool = True):
    logger.setLevel(logging.ERROR if enabled else logging.INFO)
