"""
Pointer flow graph.

An edge source -> target means every object source points to also flows
to target.  Edges are only ever added.  The graph is a networkx DiGraph
whose edges carry the FlowKind that created them.
"""

from enum import Enum

import networkx as nx


class FlowKind(Enum):
    LOCAL_ASSIGN = "local-assign"
    STATIC_LOAD = "static-load"
    STATIC_STORE = "static-store"
    INSTANCE_LOAD = "instance-load"
    INSTANCE_STORE = "instance-store"
    ARRAY_LOAD = "array-load"
    ARRAY_STORE = "array-store"
    PARAMETER_PASSING = "parameter-passing"
    RETURN = "return"


class PointerFlowGraph(object):
    def __init__(self):
        self.graph = nx.DiGraph()

    def addEdge(self, source, target, kind=FlowKind.LOCAL_ASSIGN):
        """Add source -> target.  Returns True if the edge is new."""
        if self.graph.has_edge(source, target):
            return False
        self.graph.add_edge(source, target, kind=kind)
        return True

    def hasEdge(self, source, target):
        return self.graph.has_edge(source, target)

    def successorsOf(self, pointer):
        if pointer not in self.graph:
            return []
        return list(self.graph.successors(pointer))

    def getPointers(self):
        return list(self.graph.nodes)

    def getNumberOfEdges(self):
        return self.graph.number_of_edges()
