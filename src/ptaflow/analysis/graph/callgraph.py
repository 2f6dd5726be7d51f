"""
Call graphs.

A call graph holds the reachable methods and call edges (call kind, call
site, callee); both only grow.  DefaultCallGraph is over plain methods and
Invoke statements, as built by CHA or projected from a pointer analysis.
CSCallGraph is over context-sensitive methods and call sites.

Queries:

- by caller: callSitesIn(method), getCalleesOfM(method)
- by call site: getCalleesOf(callSite), edgesOutOf(callSite)
- by callee: getCallersOf(callee), edgesInto(callee)
"""

import networkx as nx

from ptaflow.language import ir
from ptaflow.util.canonical import CanonicalObject


def getCallKind(invoke):
    """The CallKind of an Invoke statement."""
    return invoke.invokeExp.kind


class Edge(CanonicalObject):
    __slots__ = ()

    def __init__(self, kind, callSite, callee):
        self.setCanonical(kind, callSite, callee)

    @property
    def kind(self):
        return self.canonical[0]

    @property
    def callSite(self):
        return self.canonical[1]

    @property
    def callee(self):
        return self.canonical[2]

    def __repr__(self):
        return "[%s] %r -> %r" % (self.kind.name, self.callSite, self.callee)


class CallGraph(object):
    """
    Storage and queries shared by the call graph kinds.

    Subclasses define callSitesIn and getContainerOf.
    """

    def __init__(self):
        self.entries = {}
        self.reachable = {}
        self.callSiteToEdges = {}
        self.calleeToEdges = {}
        self.numEdges = 0

    def addEntryMethod(self, method):
        self.entries[method] = None
        self.addReachableMethod(method)

    def addReachableMethod(self, method):
        """Returns True if method was not reachable before."""
        if method in self.reachable:
            return False
        self.reachable[method] = None
        return True

    def addEdge(self, edge):
        """Returns True if edge is new."""
        edges = self.callSiteToEdges.setdefault(edge.callSite, {})
        if edge in edges:
            return False
        edges[edge] = None
        self.calleeToEdges.setdefault(edge.callee, {})[edge] = None
        self.numEdges += 1
        return True

    def entryMethods(self):
        return list(self.entries)

    def reachableMethods(self):
        return list(self.reachable)

    def contains(self, method):
        return method in self.reachable

    def __contains__(self, method):
        return method in self.reachable

    def edgesOutOf(self, callSite):
        return list(self.callSiteToEdges.get(callSite, ()))

    def edgesInto(self, callee):
        return list(self.calleeToEdges.get(callee, ()))

    def edges(self):
        result = []
        for edges in self.callSiteToEdges.values():
            result.extend(edges)
        return result

    def getCalleesOf(self, callSite):
        return _unique(edge.callee for edge in self.edgesOutOf(callSite))

    def getCallersOf(self, callee):
        return _unique(edge.callSite for edge in self.edgesInto(callee))

    def getCalleesOfM(self, method):
        return _unique(
            callee
            for callSite in self.callSitesIn(method)
            for callee in self.getCalleesOf(callSite)
        )

    def getNumberOfEdges(self):
        return self.numEdges

    def callSitesIn(self, method):
        raise NotImplementedError

    def getContainerOf(self, callSite):
        raise NotImplementedError

    def toNetworkX(self):
        """
        Export as a networkx MultiDiGraph.

        Nodes are the reachable methods; every call edge becomes a graph
        edge caller -> callee with "kind" and "callSite" attributes.
        """
        g = nx.MultiDiGraph()
        for method in self.reachable:
            g.add_node(method, entry=method in self.entries)
        for edge in self.edges():
            g.add_edge(
                self.getContainerOf(edge.callSite),
                edge.callee,
                kind=edge.kind,
                callSite=edge.callSite,
            )
        return g


class DefaultCallGraph(CallGraph):
    def callSitesIn(self, method):
        if method.isOpaque():
            return []
        return [stmt for stmt in method.ir.getStmts() if isinstance(stmt, ir.Invoke)]

    def getContainerOf(self, callSite):
        return callSite.method


class CSCallGraph(CallGraph):
    def __init__(self, csManager):
        CallGraph.__init__(self)
        self.csManager = csManager

    def callSitesIn(self, csMethod):
        method = csMethod.method
        if method.isOpaque():
            return []
        return [
            self.csManager.getCSCallSite(csMethod.context, stmt)
            for stmt in method.ir.getStmts()
            if isinstance(stmt, ir.Invoke)
        ]

    def getContainerOf(self, csCallSite):
        return csCallSite.container


def _unique(items):
    return list(dict.fromkeys(items))
