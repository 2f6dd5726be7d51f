"""Analysis driver.

The functions below run one analysis each on a World.  The Pipeline runs a
sequence of named analyses, feeding the call graph built by "cha" or "pta"
to the analyses that consume one, and records statistics in the compiler
context.

Example:
    compiler = CompilerContext(options=AnalysisOptions.parse("cs=2-obj"))
    results = Pipeline(["pta", "inter-constprop"]).run(compiler, world)
"""

import logging

from ptaflow.analysis.dataflow.constprop import ConstantPropagation, InterConstantPropagation
from ptaflow.analysis.dataflow.solver import IntraSolver, InterSolver
from ptaflow.analysis.graph.cfg import buildCFG
from ptaflow.analysis.graph.cha import CHABuilder
from ptaflow.analysis.graph.icfg import ICFG
from ptaflow.analysis.pta.context import makeSelector
from ptaflow.analysis.pta.solver import Solver

from . import errors

LOG = logging.getLogger(__name__)


def buildCHACallGraph(world, compiler=None):
    """Call graph of world's entry methods by class hierarchy analysis."""
    if compiler is None:
        return CHABuilder(world).build()

    with compiler.console.scope("cha"):
        callGraph = CHABuilder(world).build()
    stats = compiler.stats["cha"]
    stats["reachableMethods"] = len(callGraph.reachableMethods())
    stats["callEdges"] = callGraph.getNumberOfEdges()
    return callGraph


def runPointerAnalysis(compiler, world):
    """
    Run the pointer analysis with the selector named by compiler.options.

    Returns:
        PointerAnalysisResult
    """
    options = compiler.options
    selector = makeSelector(options.cs, options.heapDepth)
    LOG.info("pointer analysis with %r", selector)
    return Solver(compiler, world, selector).analyze()


def runInterConstantPropagation(compiler, callGraph):
    """
    Run interprocedural constant propagation over the ICFG of callGraph.

    Returns:
        DataflowResult over ICFG nodes
    """
    with compiler.console.scope("inter-constprop"):
        icfg = ICFG(callGraph)
        solver = InterSolver(InterConstantPropagation(), icfg)
        result = solver.solve()

    stats = compiler.stats["inter-constprop"]
    stats["nodes"] = len(icfg.getNodes())
    stats["iterations"] = solver.iterations
    return result


def runConstantPropagation(method):
    """Intraprocedural constant propagation of one method."""
    return IntraSolver(ConstantPropagation()).solve(buildCFG(method))


class Pipeline(object):
    """Runs named analyses in order.

    Analyses:
        cha: CHA call graph
        pta: pointer analysis; its call graph replaces a CHA call graph
        inter-constprop: interprocedural constant propagation on the most
            recent call graph
    """
    analyses = ("cha", "pta", "inter-constprop")

    def __init__(self, names=("pta", "inter-constprop")):
        for name in names:
            if name not in self.analyses:
                raise errors.ConfigurationError("unknown analysis %r" % (name,))
        self.names = tuple(names)

    def run(self, compiler, world):
        """
        Returns:
            Mapping from analysis name to its result
        """
        results = {}
        callGraph = None

        with compiler.console.scope("pipeline"):
            for name in self.names:
                if name == "cha":
                    callGraph = buildCHACallGraph(world, compiler)
                    results[name] = callGraph
                elif name == "pta":
                    result = runPointerAnalysis(compiler, world)
                    callGraph = result.getCallGraph()
                    results[name] = result
                elif name == "inter-constprop":
                    if callGraph is None:
                        errors.abort("inter-constprop needs a call graph, run cha or pta first")
                    results[name] = runInterConstantPropagation(compiler, callGraph)

        return results
