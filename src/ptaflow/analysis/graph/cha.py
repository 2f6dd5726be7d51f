"""
Call graph construction by class hierarchy analysis (CHA).

Call targets are resolved from the class hierarchy alone: a virtual or
interface call may reach the matching concrete method of every subtype of
the receiver's declared class.  Methods are processed breadth-first from the
entry methods, each exactly once.
"""

import logging
from collections import deque

from ptaflow.application.errors import UnresolvedMethodError
from ptaflow.language import ir

from .callgraph import DefaultCallGraph, Edge, getCallKind

LOG = logging.getLogger(__name__)


class CHABuilder(object):
    def __init__(self, world):
        self.world = world
        self.hierarchy = world.getClassHierarchy()

    def build(self, entries=None):
        """
        Build the call graph of the methods reachable from entries.

        Args:
            entries: Entry methods, default all entry methods of the world
        """
        if entries is None:
            entries = self.world.getEntryMethods()

        callGraph = DefaultCallGraph()
        queue = deque()
        for method in entries:
            callGraph.entries[method] = None
            queue.append(method)

        while queue:
            method = queue.popleft()
            if not callGraph.addReachableMethod(method):
                continue
            for callSite in callGraph.callSitesIn(method):
                kind = getCallKind(callSite)
                for callee in self.resolve(callSite):
                    callGraph.addEdge(Edge(kind, callSite, callee))
                    if not callGraph.contains(callee):
                        queue.append(callee)

        LOG.info(
            "CHA call graph: %d reachable methods, %d edges",
            len(callGraph.reachableMethods()),
            callGraph.getNumberOfEdges(),
        )
        return callGraph

    def resolve(self, callSite):
        """
        The possible targets of callSite.

        Raises:
            UnresolvedMethodError: a static or special call has no target
        """
        methodRef = callSite.methodRef
        kind = getCallKind(callSite)

        if kind is ir.CallKind.STATIC:
            target = self.hierarchy.resolveMethod(methodRef)
            if target is None:
                raise UnresolvedMethodError(methodRef)
            return [target]

        if kind is ir.CallKind.SPECIAL:
            target = self.hierarchy.dispatch(methodRef.declaringClass, methodRef.subsignature)
            if target is None:
                raise UnresolvedMethodError(methodRef, methodRef.declaringClass)
            return [target]

        return self.resolveVirtual(methodRef)

    def resolveVirtual(self, methodRef):
        """
        Breadth-first walk over the referenced class and all its subtypes,
        collecting the method each class dispatches the call to.
        """
        hierarchy = self.hierarchy
        subsignature = methodRef.subsignature
        root = methodRef.declaringClass

        targets = {}
        visited = {root}
        queue = deque([root])
        while queue:
            jclass = queue.popleft()

            # A class that does not override the method inherits it.
            if not jclass.isInterface:
                method = hierarchy.dispatch(jclass, subsignature)
                if method is not None:
                    targets[method] = None

            subtypes = (
                hierarchy.getDirectSubclassesOf(jclass)
                + hierarchy.getDirectSubinterfacesOf(jclass)
                + hierarchy.getDirectImplementorsOf(jclass)
            )
            for sub in subtypes:
                if sub not in visited:
                    visited.add(sub)
                    queue.append(sub)

        return list(targets)
