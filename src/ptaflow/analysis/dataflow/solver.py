"""
Worklist solvers for forward dataflow analyses.

IntraSolver runs a DataflowAnalysis over the CFG of one method.
InterSolver runs an InterDataflowAnalysis over an ICFG; call sites do not
pass facts to their successors through the node itself but through the
call, return and call-to-return edges.

Both solvers start with every node queued.  A node's IN fact is the meet of
its predecessors' OUT facts (transferred along the edge, for the ICFG),
together with the boundary fact for entry nodes.  Its successors are queued
again whenever its OUT fact changes.
"""

import logging

from ptaflow.analysis.graph import icfg as icfgedges
from ptaflow.application.errors import InternalError
from ptaflow.util.typedispatch import TypeDispatcher, dispatch, defaultdispatch
from ptaflow.util.xcollections import SetQueue

from .fact import DataflowResult

LOG = logging.getLogger(__name__)


class DataflowAnalysis(object):
    """Client interface of IntraSolver."""

    def newBoundaryFact(self, cfg):
        raise NotImplementedError

    def newInitialFact(self):
        raise NotImplementedError

    def meetInto(self, fact, target):
        """Meet fact into target, in place."""
        raise NotImplementedError

    def transferNode(self, node, inFact, outFact):
        """Compute outFact from inFact.  Returns True if outFact changed."""
        raise NotImplementedError


class InterDataflowAnalysis(object):
    """
    Client interface of InterSolver.

    Node transfers update the OUT fact in place and return whether it
    changed.  Edge transfers return the fact flowing into the edge's target
    and must not modify their argument.
    """

    def newBoundaryFact(self, method):
        raise NotImplementedError

    def newInitialFact(self):
        raise NotImplementedError

    def meetInto(self, fact, target):
        raise NotImplementedError

    def transferCallNode(self, node, inFact, outFact):
        raise NotImplementedError

    def transferNonCallNode(self, node, inFact, outFact):
        raise NotImplementedError

    def transferNormalEdge(self, edge, out):
        raise NotImplementedError

    def transferCallToReturnEdge(self, edge, out):
        raise NotImplementedError

    def transferCallEdge(self, edge, callSiteOut):
        raise NotImplementedError

    def transferReturnEdge(self, edge, returnOut):
        raise NotImplementedError


class EdgeTransfer(TypeDispatcher):
    """Applies the edge transfer of an analysis matching the ICFG edge kind."""

    def __init__(self, analysis):
        self.analysis = analysis

    @dispatch(icfgedges.NormalEdge)
    def visitNormalEdge(self, edge, out):
        return self.analysis.transferNormalEdge(edge, out)

    @dispatch(icfgedges.CallToReturnEdge)
    def visitCallToReturnEdge(self, edge, out):
        return self.analysis.transferCallToReturnEdge(edge, out)

    @dispatch(icfgedges.CallEdge)
    def visitCallEdge(self, edge, out):
        return self.analysis.transferCallEdge(edge, out)

    @dispatch(icfgedges.ReturnEdge)
    def visitReturnEdge(self, edge, out):
        return self.analysis.transferReturnEdge(edge, out)

    @defaultdispatch
    def visitUnknown(self, edge, out):
        raise InternalError("unknown ICFG edge %r" % (edge,))


class IntraSolver(object):
    def __init__(self, analysis):
        self.analysis = analysis

    def solve(self, cfg):
        analysis = self.analysis
        result = DataflowResult(analysis.newInitialFact)

        for node in cfg.getNodes():
            result.setInFact(node, analysis.newInitialFact())
            result.setOutFact(node, analysis.newInitialFact())
        entry = cfg.getEntry()
        result.setOutFact(entry, analysis.newBoundaryFact(cfg))

        worklist = SetQueue(node for node in cfg.getNodes() if node is not entry)
        iterations = 0
        while worklist:
            node = worklist.pop()
            iterations += 1

            inFact = analysis.newInitialFact()
            for pred in cfg.getPredsOf(node):
                analysis.meetInto(result.outFacts[pred], inFact)
            result.setInFact(node, inFact)

            if analysis.transferNode(node, inFact, result.outFacts[node]):
                for succ in cfg.getSuccsOf(node):
                    worklist.push(succ)

        LOG.debug("%r solved in %d iterations", cfg.method, iterations)
        return result


class InterSolver(object):
    def __init__(self, analysis, icfg):
        self.analysis = analysis
        self.icfg = icfg
        self.edgeTransfer = EdgeTransfer(analysis)
        self.iterations = 0

    def solve(self):
        analysis = self.analysis
        icfg = self.icfg
        result = DataflowResult(analysis.newInitialFact)

        boundary = {}
        for method in icfg.entryMethods():
            boundary[icfg.getEntryOf(method)] = analysis.newBoundaryFact(method)

        for node in icfg.getNodes():
            result.setInFact(node, analysis.newInitialFact())
            result.setOutFact(node, analysis.newInitialFact())
        for node, fact in boundary.items():
            result.setInFact(node, fact.copy())
            result.setOutFact(node, fact.copy())

        worklist = SetQueue(icfg.getNodes())
        while worklist:
            node = worklist.pop()
            self.iterations += 1

            if node in boundary:
                inFact = boundary[node].copy()
            else:
                inFact = analysis.newInitialFact()
            for edge in icfg.getInEdgesOf(node):
                analysis.meetInto(self.transferEdge(edge, result.outFacts[edge.source]), inFact)
            result.setInFact(node, inFact)

            if self.transferNode(node, inFact, result.outFacts[node]):
                for succ in icfg.getSuccsOf(node):
                    worklist.push(succ)

        LOG.debug("interprocedural analysis solved in %d iterations", self.iterations)
        return result

    def transferNode(self, node, inFact, outFact):
        if self.icfg.isCallSite(node):
            return self.analysis.transferCallNode(node, inFact, outFact)
        return self.analysis.transferNonCallNode(node, inFact, outFact)

    def transferEdge(self, edge, out):
        return self.edgeTransfer(edge, out)
