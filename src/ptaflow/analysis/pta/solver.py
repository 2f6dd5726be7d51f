"""
Context-sensitive pointer analysis with on-the-fly call graph construction.

The solver grows four monotone structures until none changes: the
reachable methods, the pointer flow graph (PFG), the points-to sets of its
pointers and the call graph.

A method becomes reachable in some context when it is an entry method or
the target of a call edge.  Processing its body once adds the PFG edges and
points-to facts that need no receiver object: allocations, copies, static
field accesses and static calls.

The main loop then takes (pointer, objects) entries from the worklist and
propagates the new objects along PFG edges.  When new objects reach a
variable, the statements using the variable as a base are processed for
them: instance field and array accesses get PFG edges to the pointers of
those objects, and calls on the variable are dispatched on each object's
type, adding call edges and making their targets reachable.
"""

import logging

from ptaflow.application.errors import (
    AnalysisAbort, ArityMismatchError, InternalError, UnresolvedMethodError
)
from ptaflow.language import ir
from ptaflow.language.classes import JClass
from ptaflow.analysis.graph.callgraph import CSCallGraph, Edge
from ptaflow.util.typedispatch import TypeDispatcher, dispatch, defaultdispatch

from .elements import CSManager, CSVar
from .heap import AllocationSiteHeapModel
from .pfg import PointerFlowGraph, FlowKind
from .pointsto import PointsToSet
from .result import PointerAnalysisResult
from .worklist import WorkList

LOG = logging.getLogger(__name__)


class StmtProcessor(TypeDispatcher):
    """
    Processes the statements of a newly reachable method.

    Only statements whose effect does not depend on the objects a base
    variable points to are handled here; the others are processed by the
    solver as objects arrive at their base variables.
    """
    __slots__ = "solver", "csMethod", "context"

    def __init__(self, solver, csMethod):
        self.solver = solver
        self.csMethod = csMethod
        self.context = csMethod.context

    def varPtr(self, var):
        return self.solver.csManager.getVarPtr(self.context, var)

    @dispatch(ir.New)
    def visitNew(self, stmt):
        solver = self.solver
        obj = solver.heapModel.getObj(stmt)
        heapContext = solver.selector.selectHeapContext(self.csMethod, obj)
        csObj = solver.csManager.getCSObj(heapContext, obj)
        solver.worklist.addEntry(self.varPtr(stmt.lvalue), PointsToSet.singleton(csObj))

    @dispatch(ir.Copy)
    def visitCopy(self, stmt):
        self.solver.addPFGEdge(self.varPtr(stmt.rvalue), self.varPtr(stmt.lvalue), FlowKind.LOCAL_ASSIGN)

    @dispatch(ir.LoadField)
    def visitLoadField(self, stmt):
        if stmt.isStatic():
            source = self.solver.csManager.getStaticField(stmt.field)
            self.solver.addPFGEdge(source, self.varPtr(stmt.lvalue), FlowKind.STATIC_LOAD)

    @dispatch(ir.StoreField)
    def visitStoreField(self, stmt):
        if stmt.isStatic():
            target = self.solver.csManager.getStaticField(stmt.field)
            self.solver.addPFGEdge(self.varPtr(stmt.rvalue), target, FlowKind.STATIC_STORE)

    @dispatch(ir.Invoke)
    def visitInvoke(self, stmt):
        if stmt.isStatic():
            solver = self.solver
            callee = solver.resolveCallee(None, stmt)
            csCallSite = solver.csManager.getCSCallSite(self.context, stmt)
            calleeContext = solver.selector.selectContext(csCallSite, None, callee)
            csCallee = solver.csManager.getCSMethod(calleeContext, callee)
            solver.invokeMethod(Edge(ir.CallKind.STATIC, csCallSite, csCallee))

    @dispatch(ir.AssignLiteral, ir.Binary, ir.LoadArray, ir.StoreArray,
              ir.Return, ir.If, ir.Goto, ir.Nop)
    def visitOther(self, stmt):
        pass

    @defaultdispatch
    def visitUnknown(self, stmt):
        raise InternalError("unknown statement class %s: %r" % (type(stmt).__name__, stmt))


class Solver(object):
    """
    Pointer analysis solver.

    Attributes:
        compiler: CompilerContext of the run
        world: The program under analysis
        selector: ContextSelector choosing method and heap contexts
        heapModel: Abstraction of allocation sites to objects
        csManager: Interning table of all context-sensitive elements
        pfg: The pointer flow graph
        callGraph: The context-sensitive call graph
        worklist: Pending (pointer, objects) entries
        iterations: Number of worklist entries processed
    """

    def __init__(self, compiler, world, selector, heapModel=None):
        self.compiler = compiler
        self.world = world
        self.hierarchy = world.getClassHierarchy()
        self.selector = selector
        self.heapModel = heapModel if heapModel is not None else AllocationSiteHeapModel()

        self.csManager = CSManager()
        self.pfg = PointerFlowGraph()
        self.callGraph = CSCallGraph(self.csManager)
        self.worklist = WorkList()

        self.maxIterations = compiler.options.maxIterations
        self.iterations = 0
        self.initialized = False

    def initialize(self):
        """Make every entry method reachable in the empty context."""
        assert not self.initialized
        self.initialized = True

        empty = self.selector.emptyContext()
        for method in self.world.getEntryMethods():
            csMethod = self.csManager.getCSMethod(empty, method)
            self.callGraph.entries[csMethod] = None
            self.addReachable(csMethod)

    def step(self):
        """
        Process one worklist entry.

        Returns:
            False if the worklist was empty, True otherwise

        Raises:
            AnalysisAbort: more than maxIterations entries were processed
        """
        if self.worklist.isEmpty():
            return False

        self.iterations += 1
        if self.maxIterations and self.iterations > self.maxIterations:
            raise AnalysisAbort(
                "pointer analysis did not converge within %d iterations" % self.maxIterations
            )

        pointer, pointsTo = self.worklist.pollEntry()
        delta = self.propagate(pointer, pointsTo)
        if isinstance(pointer, CSVar) and not delta.isEmpty():
            self.processInstanceStatements(pointer, delta)
        return True

    def analyze(self):
        """Run to a fixpoint and return the PointerAnalysisResult."""
        console = self.compiler.console
        with console.scope("pointer analysis"):
            if not self.initialized:
                self.initialize()
            while self.step():
                pass
            self.recordStatistics()

        return PointerAnalysisResult(self.world, self.csManager, self.callGraph, self.heapModel)

    def recordStatistics(self):
        stats = self.compiler.stats["pta"]
        stats["selector"] = repr(self.selector)
        stats["iterations"] = self.iterations
        stats["reachableMethods"] = len(self.callGraph.reachableMethods())
        stats["callEdges"] = self.callGraph.getNumberOfEdges()
        stats["pfgEdges"] = self.pfg.getNumberOfEdges()
        stats["objects"] = len(self.csManager.getCSObjs())
        LOG.info(
            "pointer analysis finished: %d iterations, %d reachable methods, %d call edges",
            self.iterations,
            stats["reachableMethods"],
            stats["callEdges"],
        )

    def addReachable(self, csMethod):
        """
        Make csMethod reachable and process its body.

        Returns:
            True if csMethod was not reachable before
        """
        if not self.callGraph.addReachableMethod(csMethod):
            return False
        self.processMethod(csMethod)
        return True

    def processMethod(self, csMethod):
        method = csMethod.method
        if method.isOpaque():
            LOG.debug("%r has no body, not processed", method)
            return

        LOG.debug("processing %r", csMethod)
        processor = StmtProcessor(self, csMethod)
        for stmt in method.ir.getStmts():
            processor(stmt)

    def addPFGEdge(self, source, target, kind=FlowKind.LOCAL_ASSIGN):
        if self.pfg.addEdge(source, target, kind):
            pointsTo = source.getPointsToSet()
            if not pointsTo.isEmpty():
                self.worklist.addEntry(target, pointsTo)

    def propagate(self, pointer, pointsTo):
        """
        Add the objects of pointsTo to pointer and forward the new ones to
        its PFG successors.

        Returns:
            The objects that were new to pointer
        """
        delta = pointer.getPointsToSet().difference(pointsTo)
        if not delta.isEmpty():
            pointer.getPointsToSet().addAll(delta)
            for succ in self.pfg.successorsOf(pointer):
                self.worklist.addEntry(succ, delta)
        return delta

    def processInstanceStatements(self, csVar, delta):
        var = csVar.var
        context = csVar.context
        csManager = self.csManager

        for recvObj in delta:
            for stmt in var.storeFields:
                self.addPFGEdge(
                    csManager.getVarPtr(context, stmt.rvalue),
                    csManager.getInstanceField(recvObj, stmt.field),
                    FlowKind.INSTANCE_STORE,
                )
            for stmt in var.loadFields:
                self.addPFGEdge(
                    csManager.getInstanceField(recvObj, stmt.field),
                    csManager.getVarPtr(context, stmt.lvalue),
                    FlowKind.INSTANCE_LOAD,
                )
            for stmt in var.storeArrays:
                self.addPFGEdge(
                    csManager.getVarPtr(context, stmt.rvalue),
                    csManager.getArrayIndex(recvObj),
                    FlowKind.ARRAY_STORE,
                )
            for stmt in var.loadArrays:
                self.addPFGEdge(
                    csManager.getArrayIndex(recvObj),
                    csManager.getVarPtr(context, stmt.lvalue),
                    FlowKind.ARRAY_LOAD,
                )
            self.processCall(csVar, recvObj)

    def processCall(self, recv, recvObj):
        """Dispatch every call on recv's variable to the type of recvObj."""
        for callSite in recv.var.invokes:
            callee = self.resolveCallee(recvObj, callSite)
            csCallSite = self.csManager.getCSCallSite(recv.context, callSite)
            calleeContext = self.selector.selectContext(csCallSite, recvObj, callee)
            csCallee = self.csManager.getCSMethod(calleeContext, callee)

            if not callee.isOpaque():
                thisVar = callee.ir.getThis()
                self.worklist.addEntry(
                    self.csManager.getVarPtr(calleeContext, thisVar),
                    PointsToSet.singleton(recvObj),
                )

            self.invokeMethod(Edge(callSite.invokeExp.kind, csCallSite, csCallee))

    def invokeMethod(self, edge):
        """
        Add a call edge.  A new edge makes the callee reachable and connects
        arguments to parameters and returned variables to the call result.
        """
        if not self.callGraph.addEdge(edge):
            return

        csCallSite = edge.callSite
        csCallee = edge.callee
        self.addReachable(csCallee)

        callee = csCallee.method
        if callee.isOpaque():
            return

        callSite = csCallSite.callSite
        args = callSite.invokeExp.args
        params = callee.ir.getParams()
        if len(args) != len(params):
            raise ArityMismatchError(callSite, callee, len(args), len(params))

        callerContext = csCallSite.context
        calleeContext = csCallee.context
        csManager = self.csManager
        for arg, param in zip(args, params):
            self.addPFGEdge(
                csManager.getVarPtr(callerContext, arg),
                csManager.getVarPtr(calleeContext, param),
                FlowKind.PARAMETER_PASSING,
            )

        result = callSite.getResult()
        if result is not None:
            target = csManager.getVarPtr(callerContext, result)
            for retVar in callee.ir.getReturnVars():
                self.addPFGEdge(csManager.getVarPtr(calleeContext, retVar), target, FlowKind.RETURN)

    def resolveCallee(self, recvObj, callSite):
        """
        The method callSite invokes, for a receiver object of recvObj.

        Static calls bind to the referenced method, special calls dispatch
        on the referenced class, and virtual or interface calls dispatch on
        the type of the receiver object.

        Raises:
            UnresolvedMethodError: dispatch finds no method
        """
        invokeExp = callSite.invokeExp
        methodRef = invokeExp.methodRef
        kind = invokeExp.kind

        if kind is ir.CallKind.STATIC:
            callee = self.hierarchy.resolveMethod(methodRef)
            if callee is None:
                raise UnresolvedMethodError(methodRef)
            return callee

        if kind is ir.CallKind.SPECIAL:
            receiverType = methodRef.declaringClass
        else:
            receiverType = recvObj.obj.type

        callee = None
        if isinstance(receiverType, JClass):
            callee = self.hierarchy.dispatch(receiverType, methodRef.subsignature)
        if callee is None:
            raise UnresolvedMethodError(methodRef, receiverType)
        return callee
