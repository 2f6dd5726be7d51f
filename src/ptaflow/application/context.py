"""
Context shared by the analyses of one run.

The CompilerContext carries the console used for phase reporting, the
analysis options and a statistics table the analyses fill in.  It is
created once by the driver and passed to every analysis.
"""

import collections

from ptaflow.config import AnalysisOptions
from ptaflow.util.console import Console


class CompilerContext(object):
    """
    Context for one analysis run.

    Attributes:
        console: Console for timed phase reporting
        options: AnalysisOptions of the run
        stats: Nested mapping, analysis name -> statistic name -> value
    """
    __slots__ = "console", "options", "stats"

    def __init__(self, console=None, options=None):
        self.console = console if console is not None else Console()
        self.options = options if options is not None else AnalysisOptions()
        self.stats = collections.defaultdict(dict)
