"""ptaflow - whole-program pointer analysis and dataflow framework.

Pointer analysis with on-the-fly call graph construction under pluggable
context sensitivity, a class hierarchy analysis call graph builder, and an
interprocedural dataflow framework that runs client analyses (constant
propagation) over either call graph.
"""

__version__ = "0.1.0"

from .application.context import CompilerContext
from .application.pipeline import Pipeline
from .config import AnalysisOptions

__all__ = [
    "AnalysisOptions",
    "CompilerContext",
    "Pipeline",
    "__version__",
]
