import logging
import sys
from typing import NoReturn

KB_UNITS = ["kB", "MB", "GB", "TB", "PB", "EB", "ZB"]


def fatal(message) -> NoReturn:
    logging.error(message)
    sys.exit(1)


def kb_to_human(kilobytes: int) -> str:
    """
    Turn an amount of kilobytes into a short human readable string, using powers of 1024
    - `512` will give `"512kB"`
    - `2048` will give `"2.0MB"`
    - `1536 * 1024` will give `"1.5GB"`
    """
    if kilobytes < 1024:
        return f"{kilobytes}kB"
    value = kilobytes / 1024
    for unit in KB_UNITS[1:-1]:
        if value < 1024:
            return f"{value:.1f}{unit}"
        value /= 1024
    return f"{value:.1f}{KB_UNITS[-1]}"
