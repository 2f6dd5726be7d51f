"""
Analysis options.

Options are plain values gathered in an AnalysisOptions instance which the
driver hands to every analysis through the CompilerContext.  They can be
built from keyword arguments, from a mapping, or from an option string of
the form ``"cs=2-obj;maxIterations=1000"``.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Optional

from ptaflow.application.errors import ConfigurationError

LOG = logging.getLogger(__name__)

# Context selector used when none is given.
defaultContextSensitivity = "ci"


@dataclass
class AnalysisOptions:
    """Options of one analysis run.

    Attributes:
        cs: Context selector, e.g. "ci", "1-call", "2-obj", "1-type".
        maxIterations: Upper bound on pointer analysis worklist entries
            processed, 0 for no bound.
        heapDepth: Heap context length, None for the selector default (k-1).
    """
    cs: str = defaultContextSensitivity
    maxIterations: int = 0
    heapDepth: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.cs, str) or not self.cs:
            raise ConfigurationError("cs must be a non-empty string, got %r" % (self.cs,))
        if not isinstance(self.maxIterations, int) or self.maxIterations < 0:
            raise ConfigurationError(
                "maxIterations must be a non-negative integer, got %r" % (self.maxIterations,)
            )
        if self.heapDepth is not None and (
            not isinstance(self.heapDepth, int) or self.heapDepth < 0
        ):
            raise ConfigurationError(
                "heapDepth must be a non-negative integer, got %r" % (self.heapDepth,)
            )

    @classmethod
    def fromDict(cls, d):
        """Build options from a mapping, rejecting unknown keys."""
        known = {f.name: f for f in dataclasses.fields(cls)}
        kwargs = {}
        for key, value in d.items():
            if key not in known:
                raise ConfigurationError("unknown analysis option %r" % (key,))
            kwargs[key] = _coerce(known[key], value)
        return cls(**kwargs)

    @classmethod
    def parse(cls, text):
        """Build options from a ``key=value;key=value`` string."""
        d = {}
        for item in text.split(";"):
            item = item.strip()
            if not item:
                continue
            key, sep, value = item.partition("=")
            if not sep:
                raise ConfigurationError("malformed analysis option %r" % (item,))
            d[key.strip()] = value.strip()
        LOG.debug("parsed analysis options %r", d)
        return cls.fromDict(d)


def _coerce(f, value):
    if not isinstance(value, str):
        return value
    if f.name in ("maxIterations", "heapDepth"):
        try:
            return int(value)
        except ValueError:
            raise ConfigurationError("%s must be an integer, got %r" % (f.name, value))
    return value
