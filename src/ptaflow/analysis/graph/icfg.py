"""
Interprocedural control flow graph (ICFG).

The ICFG joins the CFGs of all reachable methods of a call graph.  Its
edges are:

- NormalEdge: an intraprocedural edge not leaving a call site
- CallToReturnEdge: call site -> its intraprocedural successor
- CallEdge: call site -> entry node of each callee
- ReturnEdge: exit node of each callee -> successor of the call site,
  carrying the call site and the callee's returned variables
"""

from ptaflow.language import ir
from ptaflow.util.xcollections import lazydict

from .cfg import buildCFG


class ICFGEdge(object):
    __slots__ = "source", "target"

    def __init__(self, source, target):
        self.source = source
        self.target = target

    def __repr__(self):
        return "%s(%r -> %r)" % (type(self).__name__, self.source, self.target)


class NormalEdge(ICFGEdge):
    __slots__ = ()


class CallToReturnEdge(ICFGEdge):
    __slots__ = ()

    @property
    def callSite(self):
        return self.source


class CallEdge(ICFGEdge):
    __slots__ = "callee"

    def __init__(self, callSite, calleeEntry, callee):
        ICFGEdge.__init__(self, callSite, calleeEntry)
        self.callee = callee

    @property
    def callSite(self):
        return self.source


class ReturnEdge(ICFGEdge):
    __slots__ = "callSite", "callee", "returnVars"

    def __init__(self, calleeExit, returnSite, callSite, callee):
        ICFGEdge.__init__(self, calleeExit, returnSite)
        self.callSite = callSite
        self.callee = callee
        self.returnVars = () if callee.isOpaque() else tuple(callee.ir.getReturnVars())


class ICFG(object):
    """
    Attributes:
        callGraph: The (context-insensitive) call graph the ICFG is built on
        cfgs: Mapping from method to its CFG
    """

    def __init__(self, callGraph):
        self.callGraph = callGraph
        self.cfgs = lazydict(buildCFG)
        self.nodeToMethod = {}
        self.inEdges = {}
        self.outEdges = {}
        self.build()

    def build(self):
        for method in self.callGraph.reachableMethods():
            cfg = self.cfgs[method]
            for node in cfg.getNodes():
                self.nodeToMethod[node] = method
                self.inEdges.setdefault(node, [])
                self.outEdges.setdefault(node, [])

        for method in self.callGraph.reachableMethods():
            cfg = self.cfgs[method]
            for node in cfg.getNodes():
                for cfgEdge in cfg.getOutEdgesOf(node):
                    if isinstance(node, ir.Invoke):
                        self.addEdge(CallToReturnEdge(node, cfgEdge.target))
                    else:
                        self.addEdge(NormalEdge(node, cfgEdge.target))

                if isinstance(node, ir.Invoke):
                    for callee in self.callGraph.getCalleesOf(node):
                        calleeCFG = self.cfgs[callee]
                        self.addEdge(CallEdge(node, calleeCFG.getEntry(), callee))
                        for returnSite in cfg.getSuccsOf(node):
                            self.addEdge(ReturnEdge(calleeCFG.getExit(), returnSite, node, callee))

    def addEdge(self, edge):
        self.outEdges[edge.source].append(edge)
        self.inEdges[edge.target].append(edge)

    def getNodes(self):
        return list(self.nodeToMethod)

    def getInEdgesOf(self, node):
        return self.inEdges[node]

    def getOutEdgesOf(self, node):
        return self.outEdges[node]

    def getPredsOf(self, node):
        return [edge.source for edge in self.inEdges[node]]

    def getSuccsOf(self, node):
        return [edge.target for edge in self.outEdges[node]]

    def getCFGOf(self, method):
        return self.cfgs[method]

    def getEntryOf(self, method):
        return self.cfgs[method].getEntry()

    def getExitOf(self, method):
        return self.cfgs[method].getExit()

    def getContainingMethodOf(self, node):
        return self.nodeToMethod[node]

    def isCallSite(self, node):
        return isinstance(node, ir.Invoke)

    def getCalleesOf(self, callSite):
        return self.callGraph.getCalleesOf(callSite)

    def getCallersOf(self, method):
        return self.callGraph.getCallersOf(method)

    def entryMethods(self):
        return self.callGraph.entryMethods()

    def __contains__(self, node):
        return node in self.nodeToMethod
