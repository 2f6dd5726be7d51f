"""
Intraprocedural control flow graphs.

Nodes are the statements of one method plus a synthetic entry and exit
node.  Edges:

- entry -> first statement
- statement -> next statement, for statements that can fall through
- Goto -> target
- If -> target and If -> next statement
- Return -> exit

A method without a body gets a graph with the edge entry -> exit alone.
"""

from enum import Enum

from ptaflow.language import ir


class EdgeKind(Enum):
    ENTRY = "entry"
    FALL_THROUGH = "fall-through"
    GOTO = "goto"
    IF_TRUE = "if-true"
    IF_FALSE = "if-false"
    RETURN = "return"


class CFGNode(object):
    __slots__ = "method"

    def __init__(self, method):
        self.method = method


class Entry(CFGNode):
    __slots__ = ()

    def __repr__(self):
        return "Entry<%r>" % (self.method,)


class Exit(CFGNode):
    __slots__ = ()

    def __repr__(self):
        return "Exit<%r>" % (self.method,)


class CFGEdge(object):
    __slots__ = "kind", "source", "target"

    def __init__(self, kind, source, target):
        self.kind = kind
        self.source = source
        self.target = target

    def __repr__(self):
        return "%r -%s-> %r" % (self.source, self.kind.value, self.target)


class CFG(object):
    """
    Attributes:
        method: The method the graph belongs to
        entry: Synthetic entry node
        exit: Synthetic exit node
    """

    def __init__(self, method):
        self.method = method
        self.entry = Entry(method)
        self.exit = Exit(method)
        self.nodes = [self.entry]
        self.inEdges = {self.entry: []}
        self.outEdges = {self.entry: []}

    def addNode(self, node):
        self.nodes.append(node)
        self.inEdges[node] = []
        self.outEdges[node] = []

    def addEdge(self, kind, source, target):
        edge = CFGEdge(kind, source, target)
        self.outEdges[source].append(edge)
        self.inEdges[target].append(edge)
        return edge

    def getEntry(self):
        return self.entry

    def getExit(self):
        return self.exit

    def isEntry(self, node):
        return node is self.entry

    def isExit(self, node):
        return node is self.exit

    def getNodes(self):
        return self.nodes

    def getInEdgesOf(self, node):
        return self.inEdges[node]

    def getOutEdgesOf(self, node):
        return self.outEdges[node]

    def getPredsOf(self, node):
        return [edge.source for edge in self.inEdges[node]]

    def getSuccsOf(self, node):
        return [edge.target for edge in self.outEdges[node]]

    def __contains__(self, node):
        return node in self.inEdges


def buildCFG(method):
    cfg = CFG(method)
    if method.isOpaque():
        cfg.addNode(cfg.exit)
        cfg.addEdge(EdgeKind.ENTRY, cfg.entry, cfg.exit)
        return cfg

    stmts = method.ir.getStmts()
    for stmt in stmts:
        cfg.addNode(stmt)
    cfg.addNode(cfg.exit)

    cfg.addEdge(EdgeKind.ENTRY, cfg.entry, stmts[0])

    for i, stmt in enumerate(stmts):
        if isinstance(stmt, ir.Return):
            cfg.addEdge(EdgeKind.RETURN, stmt, cfg.exit)
        elif isinstance(stmt, ir.Goto):
            cfg.addEdge(EdgeKind.GOTO, stmt, stmt.target)
        elif isinstance(stmt, ir.If):
            cfg.addEdge(EdgeKind.IF_TRUE, stmt, stmt.target)
            cfg.addEdge(EdgeKind.IF_FALSE, stmt, stmts[i + 1])
        else:
            cfg.addEdge(EdgeKind.FALL_THROUGH, stmt, stmts[i + 1])

    return cfg
