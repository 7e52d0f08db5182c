"""
Diagnostics logging for hoptrace.

Hop lines go to the rich console on stdout; this logger carries the
diagnostics behind them (send/receive faults, reverse DNS trouble) on
stderr so they never interleave with a trace someone is piping.
"""

import logging
import sys
from typing import Optional

CONSOLE_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger("hoptrace")


def setup_logging(debug: bool = False,
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Route hoptrace diagnostics to stderr and, optionally, a file.

    Warnings only on stderr unless ``debug`` is set; the file, when given,
    always gets everything down to DEBUG. Calling it again replaces the
    previous handlers.
    """
    logger.setLevel(logging.DEBUG if debug or log_file else logging.INFO)
    logger.handlers.clear()

    stderr = logging.StreamHandler(sys.stderr)
    stderr.setLevel(logging.DEBUG if debug else logging.WARNING)
    stderr.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(stderr)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger for one hoptrace module, e.g. ``get_logger("prober")``"""
    return logger.getChild(name)
