#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
The fargate-tasks logger. Progress goes to stdout, so the template can still be piped when
written to a file, and problems go to stderr.
"""

from __future__ import annotations

import logging as logthings
import sys

APP_LOGGER_NAME = "fargate-tasks"


class TasksFormatter(logthings.Formatter):
    """
    Tasks are synthesized in parallel, so the thread is shown in debug messages
    along with the code location.
    """

    default_format = "%(asctime)s [%(levelname)s] %(message)s"
    debug_format = (
        "%(asctime)s [%(levelname)s] (%(threadName)s %(module)s.%(funcName)s:%(lineno)d) "
        "%(message)s"
    )
    date_format = "%Y-%m-%d %H:%M:%S"

    def __init__(self):
        super().__init__(self.default_format, self.date_format)
        self.debug_formatter = logthings.Formatter(self.debug_format, self.date_format)

    def format(self, record) -> str:
        if record.levelno <= logthings.DEBUG:
            return self.debug_formatter.format(record)
        return super().format(record)


class StdoutFilter(logthings.Filter):
    def filter(self, record):
        return record.levelno < logthings.WARNING


class StderrFilter(logthings.Filter):
    def filter(self, record):
        return record.levelno >= logthings.WARNING


def setup_logging(level: int = logthings.INFO) -> logthings.Logger:
    """
    Sets the fargate-tasks logger with INFO and DEBUG messages going to stdout,
    everything else to stderr.

    :param int level: the logger level
    """
    app_logger = logthings.getLogger(APP_LOGGER_NAME)
    for h in list(app_logger.handlers):
        app_logger.removeHandler(h)

    stdout_handler = logthings.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(TasksFormatter())
    stdout_handler.addFilter(StdoutFilter())

    stderr_handler = logthings.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(TasksFormatter())
    stderr_handler.addFilter(StderrFilter())

    app_logger.addHandler(stdout_handler)
    app_logger.addHandler(stderr_handler)
    app_logger.setLevel(level)
    return app_logger


LOG = setup_logging()
