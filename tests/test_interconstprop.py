import unittest

from ptaflow.analysis.dataflow.constprop import NAC, InterConstantPropagation, Value
from ptaflow.analysis.dataflow.solver import InterSolver
from ptaflow.analysis.graph import icfg as icfgedges
from ptaflow.analysis.graph.icfg import ICFG
from ptaflow.application.context import CompilerContext
from ptaflow.application.pipeline import (
    Pipeline, buildCHACallGraph, runInterConstantPropagation
)
from ptaflow.language.builder import ProgramBuilder
from ptaflow.language.types import INT

from sample_programs import identityProgram


def solveWithCHA(world):
    return InterSolver(InterConstantPropagation(), ICFG(buildCHACallGraph(world))).solve()


def lastStmt(mb):
    return mb.method.ir.getStmts()[-1]


class TestICFG(unittest.TestCase):
    def setUp(self):
        self.program = identityProgram()
        self.icfg = ICFG(buildCHACallGraph(self.program.world))

    def testCallSiteEdges(self):
        program = self.program
        icfg = self.icfg
        kinds = dict((type(edge), edge) for edge in icfg.getOutEdgesOf(program.call))

        self.assertEqual(set(kinds), set([icfgedges.CallToReturnEdge, icfgedges.CallEdge]))
        self.assertIs(kinds[icfgedges.CallToReturnEdge].target, program.returnSite)
        callEdge = kinds[icfgedges.CallEdge]
        self.assertIs(callEdge.target, icfg.getEntryOf(program.ident))
        self.assertIs(callEdge.callee, program.ident)
        self.assertTrue(icfg.isCallSite(program.call))

    def testReturnEdge(self):
        program = self.program
        icfg = self.icfg
        returnEdges = [
            edge for edge in icfg.getInEdgesOf(program.returnSite)
            if isinstance(edge, icfgedges.ReturnEdge)
        ]
        self.assertEqual(len(returnEdges), 1)
        edge = returnEdges[0]
        self.assertIs(edge.source, icfg.getExitOf(program.ident))
        self.assertIs(edge.callSite, program.call)
        self.assertEqual(edge.returnVars, (program.p,))

    def testNodes(self):
        program = self.program
        icfg = self.icfg
        self.assertIs(icfg.getContainingMethodOf(program.call), program.main)
        self.assertIs(icfg.getContainingMethodOf(program.p.method.ir.getStmts()[0]), program.ident)
        self.assertIn(icfg.getEntryOf(program.ident), icfg)
        self.assertEqual(icfg.entryMethods(), [program.main])
        self.assertEqual(icfg.getCallersOf(program.ident), [program.call])
        for node in icfg.getNodes():
            for edge in icfg.getOutEdgesOf(node):
                if not isinstance(edge, (icfgedges.CallEdge, icfgedges.ReturnEdge)):
                    self.assertIs(
                        icfg.getContainingMethodOf(edge.target),
                        icfg.getContainingMethodOf(node),
                    )


class TestInterConstantPropagation(unittest.TestCase):
    def testConstantThroughCall(self):
        program = identityProgram()
        result = solveWithCHA(program.world)

        inFact = result.getInFact(program.returnSite)
        self.assertEqual(inFact.get(program.x), Value.makeConstant(7))
        self.assertEqual(inFact.get(program.t), Value.makeConstant(7))
        self.assertEqual(result.getOutFact(program.call).get(program.t), Value.makeConstant(7))

    def testConstantThroughPointerAnalysisCallGraph(self):
        program = identityProgram()
        compiler = CompilerContext()
        results = Pipeline(["pta", "inter-constprop"]).run(compiler, program.world)

        inFact = results["inter-constprop"].getInFact(program.returnSite)
        self.assertEqual(inFact.get(program.x), Value.makeConstant(7))

    def testCallToReturnKillsResult(self):
        pb = ProgramBuilder()
        Main = pb.newClass("Main")
        ident = Main.method("id", [INT], INT, isStatic=True, paramNames=["p"])
        ident.ret(ident.param(0))

        main = Main.method("main", isStatic=True)
        t = main.var("t", INT)
        x = main.var("x", INT)
        main.literal(x, 3)
        main.literal(t, 7)
        main.invokeStatic(ident, [t], result=x)
        world = pb.build(main=main)

        result = solveWithCHA(world)
        self.assertEqual(result.getInFact(lastStmt(main)).get(x), Value.makeConstant(7))

    def testCallSitesMeetInCallee(self):
        pb = ProgramBuilder()
        Main = pb.newClass("Main")
        ident = Main.method("id", [INT], INT, isStatic=True, paramNames=["p"])
        ident.ret(ident.param(0))

        main = Main.method("main", isStatic=True)
        a, b, x, y = [main.var(n, INT) for n in ("a", "b", "x", "y")]
        main.literal(a, 1)
        main.literal(b, 2)
        main.invokeStatic(ident, [a], result=x)
        main.invokeStatic(ident, [b], result=y)
        world = pb.build(main=main)

        result = solveWithCHA(world)
        fact = result.getInFact(lastStmt(main))
        self.assertEqual(fact.get(x), NAC)
        self.assertEqual(fact.get(y), NAC)
        self.assertEqual(fact.get(a), Value.makeConstant(1))

    def testOpaqueCallee(self):
        pb = ProgramBuilder()
        Main = pb.newClass("Main")
        native = Main.declare("hash", [INT], INT, isStatic=True, isNative=True)

        main = Main.method("main", isStatic=True)
        t = main.var("t", INT)
        x = main.var("x", INT)
        main.literal(t, 1)
        main.invokeStatic(native, [t], result=x)
        world = pb.build(main=main)

        result = solveWithCHA(world)
        fact = result.getInFact(lastStmt(main))
        self.assertEqual(fact.get(x), NAC)
        self.assertEqual(fact.get(t), Value.makeConstant(1))

    def testEntryParametersAreNAC(self):
        pb = ProgramBuilder()
        main = pb.newClass("Main").method("main", [INT], isStatic=True, paramNames=["n"])
        x = main.var("x", INT)
        main.binary(x, "+", main.param(0), 1)
        world = pb.build(main=main)

        result = solveWithCHA(world)
        self.assertEqual(result.getOutFact(lastStmt(main)).get(x), NAC)

    def testVirtualCallPrecision(self):
        pb = ProgramBuilder()
        A = pb.newClass("A")
        B = pb.newClass("B", A)
        for jclass, value in ((A, 1), (B, 2)):
            get = jclass.method("get", (), INT)
            c = get.var("c", INT)
            get.literal(c, value)
            get.ret(c)

        main = pb.newClass("Main").method("main", isStatic=True)
        a = main.var("a", A.jclass)
        x = main.var("x", INT)
        main.new(a, B.jclass)
        main.invokeVirtual(A.ref("get", (), INT), a, [], result=x)
        world = pb.build(main=main)

        self.assertEqual(solveWithCHA(world).getInFact(lastStmt(main)).get(x), NAC)

        compiler = CompilerContext()
        results = Pipeline(["pta", "inter-constprop"]).run(compiler, world)
        fact = results["inter-constprop"].getInFact(lastStmt(main))
        self.assertEqual(fact.get(x), Value.makeConstant(2))

    def testStatistics(self):
        program = identityProgram()
        compiler = CompilerContext()
        callGraph = buildCHACallGraph(program.world, compiler)
        runInterConstantPropagation(compiler, callGraph)

        stats = compiler.stats["inter-constprop"]
        self.assertEqual(stats["nodes"], len(ICFG(callGraph).getNodes()))
        self.assertGreaterEqual(stats["iterations"], stats["nodes"])
