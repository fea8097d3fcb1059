"""Logging initialisation code."""

import logging
import logging.handlers
import os
import sys
import time

__author__ = "ft"

FILE_FORMATTER = "%(asctime)s: %(name)s: %(levelname)s %(message)s"
SYSLOG_FORMATTER = "%(name)s: %(levelname)s %(message)s"


def get_logger(
    progname: str, debug: bool = False, syslog: bool = False, filelog: bool = False
) -> logging.Logger:
    """
    Initialize the root logger for a tool.

    Log to stderr, and optionally to syslog and a log file named after the program,
    the current time and the process id.
    """
    level = logging.INFO if not debug else logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format=FILE_FORMATTER)
    logger = logging.getLogger()
    # Only warnings and errors go to stderr when it is not a TTY (e.g. when run from cron)
    if not sys.stderr.isatty() and not debug:
        for this_h in logger.handlers:
            this_h.setLevel(logging.WARNING)
    if syslog:
        syslog_h = logging.handlers.SysLogHandler()
        syslog_h.setFormatter(logging.Formatter(SYSLOG_FORMATTER))
        logger.addHandler(syslog_h)
    if filelog:
        file_h = logging.FileHandler(
            f"{progname}-{time.strftime('%Y%m%d-%H%M%S')}-{os.getpid()}.log"
        )
        file_h.setFormatter(logging.Formatter(FILE_FORMATTER))
        logger.addHandler(file_h)
    return logger
