"""
Results of a pointer analysis run.

Context-sensitive queries answer with CSObj handles; the context-
insensitive projections merge all contexts and answer with the abstract
objects (heap.Obj) alone.  Queries about elements the analysis never
created answer with empty sets.
"""

from ptaflow.analysis.graph.callgraph import DefaultCallGraph, Edge


class PointerAnalysisResult(object):
    def __init__(self, world, csManager, csCallGraph, heapModel):
        self.world = world
        self.csManager = csManager
        self.csCallGraph = csCallGraph
        self.heapModel = heapModel
        self._varsCache = None
        self._callGraph = None

    def getCSVars(self):
        return self.csManager.getCSVars()

    def getCSObjs(self):
        return self.csManager.getCSObjs()

    def getObjects(self):
        return self.heapModel.getObjects()

    def getVars(self):
        """Variables with a points-to set in some context."""
        return list(self._csVarsByVar())

    def getCSPointsToSet(self, context, var):
        """CSObjs var may point to in context."""
        csVar = self.csManager.findVarPtr(context, var)
        if csVar is None:
            return set()
        return set(csVar.getPointsToSet())

    def getPointsToSet(self, var):
        """Objects var may point to in any context."""
        return _project(
            csVar.getPointsToSet() for csVar in self._csVarsByVar().get(var, ())
        )

    def getStaticFieldPointsTo(self, field):
        pointer = self.csManager.findStaticField(field)
        if pointer is None:
            return set()
        return _project((pointer.getPointsToSet(),))

    def getInstanceFieldPointsTo(self, obj, field):
        """Objects field of obj may point to, for obj in any heap context."""
        return _project(
            pointer.getPointsToSet()
            for pointer in self.csManager.getInstanceFields()
            if pointer.base.obj is obj and pointer.field is field
        )

    def getArrayPointsTo(self, obj):
        return _project(
            pointer.getPointsToSet()
            for pointer in self.csManager.getArrayIndexes()
            if pointer.array.obj is obj
        )

    def mayAlias(self, var1, var2):
        return not self.getPointsToSet(var1).isdisjoint(self.getPointsToSet(var2))

    def getCSCallGraph(self):
        return self.csCallGraph

    def getCallGraph(self):
        """
        Context-insensitive projection of the call graph, over methods and
        Invoke statements.
        """
        if self._callGraph is None:
            cg = DefaultCallGraph()
            for csMethod in self.csCallGraph.entryMethods():
                cg.addEntryMethod(csMethod.method)
            for csMethod in self.csCallGraph.reachableMethods():
                cg.addReachableMethod(csMethod.method)
            for edge in self.csCallGraph.edges():
                cg.addEdge(Edge(edge.kind, edge.callSite.callSite, edge.callee.method))
            self._callGraph = cg
        return self._callGraph

    def _csVarsByVar(self):
        if self._varsCache is None:
            cache = {}
            for csVar in self.csManager.getCSVars():
                cache.setdefault(csVar.var, []).append(csVar)
            self._varsCache = cache
        return self._varsCache


def _project(pointsToSets):
    result = set()
    for pointsTo in pointsToSets:
        for csObj in pointsTo:
            result.add(csObj.obj)
    return result
