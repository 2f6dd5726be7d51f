import itertools
import unittest

from ptaflow.analysis.dataflow.constprop import (
    CPFact, ConstantPropagation, NAC, UNDEF, Value, evaluate, fold, meetValue
)
from ptaflow.application.pipeline import runConstantPropagation
from ptaflow.language import ir
from ptaflow.language.builder import ProgramBuilder
from ptaflow.language.types import INT


def newMain(paramTypes=(), paramNames=None):
    pb = ProgramBuilder()
    A = pb.newClass("A")
    return A, A.method("main", list(paramTypes), isStatic=True, paramNames=paramNames)


class TestLattice(unittest.TestCase):
    values = [UNDEF, NAC, Value.makeConstant(1), Value.makeConstant(2), Value.makeConstant(-7)]

    def testCommutative(self):
        for a, b in itertools.product(self.values, repeat=2):
            self.assertEqual(meetValue(a, b), meetValue(b, a))

    def testIdempotent(self):
        for a in self.values:
            self.assertEqual(meetValue(a, a), a)

    def testNACDominates(self):
        for a in self.values:
            self.assertEqual(meetValue(NAC, a), NAC)
        self.assertEqual(meetValue(UNDEF, UNDEF), UNDEF)

    def testConstants(self):
        one = Value.makeConstant(1)
        self.assertEqual(meetValue(one, Value.makeConstant(1)), one)
        self.assertEqual(meetValue(one, Value.makeConstant(2)), NAC)
        self.assertEqual(meetValue(UNDEF, one), one)

    def testValues(self):
        self.assertTrue(UNDEF.isUndef())
        self.assertTrue(NAC.isNAC())
        self.assertEqual(Value.makeConstant(3).getConstant(), 3)
        self.assertEqual(Value.makeConstant(2**32 + 5), Value.makeConstant(5))
        self.assertEqual(repr(Value.makeConstant(3)), "3")
        self.assertEqual(repr(NAC), "NAC")


class TestFold(unittest.TestCase):
    def testArithmetic(self):
        self.assertEqual(fold("+", 2**31 - 1, 1), -2**31)
        self.assertEqual(fold("-", -2**31, 1), 2**31 - 1)
        self.assertEqual(fold("*", 65536, 65536), 0)
        self.assertEqual(fold("/", 7, 2), 3)
        self.assertEqual(fold("/", -7, 2), -3)
        self.assertEqual(fold("/", -2**31, -1), -2**31)
        self.assertEqual(fold("%", -7, 2), -1)
        self.assertEqual(fold("%", 7, -2), 1)

    def testBitwise(self):
        self.assertEqual(fold("&", 12, 10), 8)
        self.assertEqual(fold("|", 12, 10), 14)
        self.assertEqual(fold("^", 12, 10), 6)
        self.assertEqual(fold("<<", 1, 33), 2)
        self.assertEqual(fold("<<", 1, 31), -2**31)
        self.assertEqual(fold(">>", -8, 1), -4)
        self.assertEqual(fold(">>>", -1, 28), 15)
        self.assertEqual(fold(">>>", 8, 1), 4)

    def testComparisons(self):
        self.assertEqual(fold("<", 1, 2), 1)
        self.assertEqual(fold(">=", 1, 2), 0)
        self.assertEqual(fold("==", 3, 3), 1)
        self.assertEqual(fold("!=", 3, 3), 0)


class TestEvaluate(unittest.TestCase):
    def setUp(self):
        self.A, mb = newMain()
        self.x = mb.var("x", INT)
        self.y = mb.var("y", INT)
        self.r = mb.var("r", self.A.jclass)

    def fact(self, x, y):
        return CPFact({self.x: x, self.y: y})

    def testVarsAndLiterals(self):
        fact = self.fact(Value.makeConstant(4), NAC)
        self.assertEqual(evaluate(self.x, fact), Value.makeConstant(4))
        self.assertEqual(evaluate(ir.IntLiteral(9), fact), Value.makeConstant(9))
        self.assertEqual(evaluate(self.r, fact), NAC)

    def testBinary(self):
        four = Value.makeConstant(4)
        exp = ir.BinaryExp("+", self.x, self.y)
        self.assertEqual(evaluate(exp, self.fact(four, Value.makeConstant(3))), Value.makeConstant(7))
        self.assertEqual(evaluate(exp, self.fact(four, NAC)), NAC)
        self.assertEqual(evaluate(exp, self.fact(four, UNDEF)), UNDEF)
        self.assertEqual(evaluate(exp, self.fact(NAC, UNDEF)), NAC)

    def testDivisionByZero(self):
        zero = Value.makeConstant(0)
        for op in ("/", "%"):
            exp = ir.BinaryExp(op, self.x, self.y)
            self.assertEqual(evaluate(exp, self.fact(NAC, zero)), UNDEF)
            self.assertEqual(evaluate(exp, self.fact(Value.makeConstant(5), zero)), UNDEF)
        exp = ir.BinaryExp("*", self.x, self.y)
        self.assertEqual(evaluate(exp, self.fact(NAC, zero)), NAC)

    def testOtherExpressions(self):
        self.assertEqual(evaluate(ir.NewExp(self.A.jclass), CPFact()), NAC)


class TestFact(unittest.TestCase):
    def testUndefIsNotStored(self):
        _, mb = newMain()
        x = mb.var("x", INT)
        fact = CPFact()
        self.assertEqual(fact.get(x), UNDEF)
        self.assertFalse(fact.update(x, UNDEF))
        self.assertTrue(fact.update(x, NAC))
        self.assertFalse(fact.update(x, NAC))
        self.assertTrue(fact.update(x, UNDEF))
        self.assertEqual(len(fact), 0)

    def testCopy(self):
        _, mb = newMain()
        x = mb.var("x", INT)
        fact = CPFact({x: NAC})
        copy = fact.copy()
        self.assertEqual(copy, fact)
        copy.update(x, Value.makeConstant(1))
        self.assertNotEqual(copy, fact)
        self.assertTrue(fact.copyFrom(copy))
        self.assertFalse(fact.copyFrom(copy))
        self.assertEqual(fact.get(x), Value.makeConstant(1))


class TestConstantPropagation(unittest.TestCase):
    def testAddition(self):
        _, mb = newMain()
        x, y, z = [mb.var(n, INT) for n in "xyz"]
        mb.literal(x, 1)
        mb.literal(y, 2)
        mb.binary(z, "+", x, y)
        mb.finish()

        result = runConstantPropagation(mb.method)
        out = result.getOutFact(mb.method.ir.getStmts()[-1])
        self.assertEqual(out.get(z), Value.makeConstant(3))
        self.assertEqual(out.get(x), Value.makeConstant(1))

    def testMerge(self):
        _, mb = newMain([INT], ["cond"])
        x = mb.var("x", INT)
        other = mb.label("else")
        end = mb.label("end")
        mb.ifGoto("==", mb.param(0), 0, other)
        mb.literal(x, 1)
        mb.goto(end)
        mb.mark(other)
        mb.literal(x, 2)
        mb.mark(end)
        mb.finish()
        stmts = mb.method.ir.getStmts()

        result = runConstantPropagation(mb.method)
        self.assertEqual(result.getOutFact(stmts[1]).get(x), Value.makeConstant(1))
        self.assertEqual(result.getOutFact(stmts[3]).get(x), Value.makeConstant(2))
        self.assertEqual(result.getInFact(stmts[-1]).get(x), NAC)

    def testSameValueOnBothBranches(self):
        _, mb = newMain([INT], ["cond"])
        x = mb.var("x", INT)
        other = mb.label("else")
        end = mb.label("end")
        mb.ifGoto("<", mb.param(0), 0, other)
        mb.literal(x, 4)
        mb.goto(end)
        mb.mark(other)
        mb.literal(x, 4)
        mb.mark(end)
        mb.finish()

        result = runConstantPropagation(mb.method)
        self.assertEqual(result.getInFact(mb.method.ir.getStmts()[-1]).get(x), Value.makeConstant(4))

    def testDivisionByZero(self):
        _, mb = newMain()
        a, b, x, y = [mb.var(n, INT) for n in ("a", "b", "x", "y")]
        mb.literal(a, 5)
        mb.literal(b, 0)
        mb.binary(x, "/", a, b)
        mb.binary(y, "%", a, 0)
        mb.finish()

        result = runConstantPropagation(mb.method)
        out = result.getOutFact(mb.method.ir.getStmts()[-1])
        self.assertTrue(out.get(x).isUndef())
        self.assertTrue(out.get(y).isUndef())

    def testParametersAreNAC(self):
        A, mb = newMain([INT, INT], ["n", "m"])
        obj = mb.var("obj", A.jclass)
        z = mb.var("z", INT)
        mb.new(obj, A.jclass)
        mb.binary(z, "*", mb.param(0), 0)
        mb.finish()

        result = runConstantPropagation(mb.method)
        out = result.getOutFact(mb.method.ir.getStmts()[-1])
        self.assertEqual(out.get(mb.param(0)), NAC)
        self.assertEqual(out.get(mb.param(1)), NAC)
        # No algebraic simplification: NAC * 0 is NAC.
        self.assertEqual(out.get(z), NAC)
        self.assertNotIn(obj, out.keys())

    def testLoop(self):
        _, mb = newMain()
        i = mb.var("i", INT)
        k = mb.var("k", INT)
        mb.literal(i, 0)
        mb.literal(k, 10)
        loop = mb.label("loop")
        mb.mark(loop)
        mb.binary(i, "+", i, 1)
        mb.ifGoto("<", i, k, loop)
        mb.finish()
        stmts = mb.method.ir.getStmts()

        result = runConstantPropagation(mb.method)
        out = result.getOutFact(stmts[-1])
        self.assertEqual(out.get(i), NAC)
        self.assertEqual(out.get(k), Value.makeConstant(10))

    def testUnreachedNode(self):
        _, mb = newMain()
        mb.finish()
        result = runConstantPropagation(mb.method)
        fact = result.getOutFact(ir.Nop())
        self.assertIsInstance(fact, CPFact)
        self.assertEqual(len(fact), 0)

    def testInvokeResultIsNAC(self):
        pb = ProgramBuilder()
        A = pb.newClass("A")
        f = A.method("f", (), INT, isStatic=True)
        c = f.var("c", INT)
        f.literal(c, 1)
        f.ret(c)
        main = A.method("main", isStatic=True)
        x = main.var("x", INT)
        main.invokeStatic(f, [], result=x)
        pb.build(main=main)

        result = runConstantPropagation(main.method)
        self.assertEqual(result.getOutFact(main.method.ir.getStmts()[-1]).get(x), NAC)

    def testBoundaryFact(self):
        A, mb = newMain([INT, INT], ["n", "m"])
        mb.finish()
        cp = ConstantPropagation()
        fact = cp.boundaryFactOf(mb.method)
        self.assertEqual(set(fact.keys()), set(mb.params))
