"""
Timed phase reporting.

Phases nest; entering and leaving one is reported through the
``ptaflow.console`` logger together with the time spent inside it.
"""

import contextlib
import logging
import time

LOG = logging.getLogger("ptaflow.console")


def elapsedTime(t):
    """
    Format a time duration in seconds as a human-readable string.

    Example:
        elapsedTime(0.05) -> "   50 ms"
    """
    if t < 1.0:
        return "%5.4g ms" % (t * 1000.0)
    elif t < 60.0:
        return "%5.4g s" % (t)
    elif t < 3600.0:
        return "%5.4g m" % (t / 60.0)
    else:
        return "%5.4g h" % (t / 3600.0)


class Console(object):
    """
    Attributes:
        logger: Logger receiving the phase messages
        names: Names of the open phases, outermost first
    """

    def __init__(self, logger=None):
        self.logger = logger if logger is not None else LOG
        self.names = []

    def path(self):
        return "[ %s ]" % " | ".join(self.names)

    @contextlib.contextmanager
    def scope(self, name):
        self.names.append(name)
        self.logger.info("begin %s", self.path())
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.logger.info("end   %s %s", self.path(), elapsedTime(elapsed))
            self.names.pop()
