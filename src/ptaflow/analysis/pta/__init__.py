"""Pointer analysis."""

from .context import Context, ContextSelector, makeSelector
from .result import PointerAnalysisResult
from .solver import Solver
