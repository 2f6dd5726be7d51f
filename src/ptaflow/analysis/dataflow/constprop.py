"""
Constant propagation over int-like variables.

Lattice values, from bottom to top: UNDEF, one constant per 32-bit integer,
NAC (not a constant).  Distinct constants meet to NAC.

ConstantPropagation is the intraprocedural analysis over one CFG;
InterConstantPropagation reuses its statement transfer and adds the edge
transfers of the ICFG.

Arithmetic follows 32-bit two's complement semantics: results wrap, `/`
truncates toward zero, `%` takes the sign of the dividend, shift counts are
masked to 5 bits and `>>>` shifts in zeros.  Comparisons produce 1 or 0.
Division or remainder by a constant zero yields UNDEF.
"""

import logging

from ptaflow.application.errors import ArityMismatchError
from ptaflow.language import ir
from ptaflow.language.types import canHoldInt
from ptaflow.util.canonical import CanonicalObject

from .fact import MapFact
from .solver import DataflowAnalysis, InterDataflowAnalysis

LOG = logging.getLogger(__name__)


class Value(CanonicalObject):
    __slots__ = ()

    def __init__(self, kind, constant=None):
        self.setCanonical(kind, constant)

    @classmethod
    def makeConstant(cls, value):
        return cls("constant", toInt32(value))

    def isUndef(self):
        return self.canonical[0] == "undef"

    def isNAC(self):
        return self.canonical[0] == "nac"

    def isConstant(self):
        return self.canonical[0] == "constant"

    def getConstant(self):
        assert self.isConstant(), self
        return self.canonical[1]

    def __repr__(self):
        if self.isConstant():
            return repr(self.canonical[1])
        return self.canonical[0].upper()


UNDEF = Value("undef")
NAC = Value("nac")


def toInt32(value):
    value &= 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return value


def meetValue(v1, v2):
    if v1.isNAC() or v2.isNAC():
        return NAC
    if v1.isUndef():
        return v2
    if v2.isUndef():
        return v1
    if v1 == v2:
        return v1
    return NAC


class CPFact(MapFact):
    """Variable -> Value; unbound variables are UNDEF."""
    __slots__ = ()
    bottom = UNDEF


def _divide(a, b):
    q = abs(a) // abs(b)
    return -q if (a < 0) != (b < 0) else q


def _remainder(a, b):
    r = abs(a) % abs(b)
    return -r if a < 0 else r


foldOps = {
    "+": lambda a, b: a + b,
    "-": lambda a, b: a - b,
    "*": lambda a, b: a * b,
    "/": _divide,
    "%": _remainder,
    "&": lambda a, b: a & b,
    "|": lambda a, b: a | b,
    "^": lambda a, b: a ^ b,
    "<<": lambda a, b: a << (b & 0x1F),
    ">>": lambda a, b: a >> (b & 0x1F),
    ">>>": lambda a, b: (a & 0xFFFFFFFF) >> (b & 0x1F),
    "==": lambda a, b: int(a == b),
    "!=": lambda a, b: int(a != b),
    "<": lambda a, b: int(a < b),
    "<=": lambda a, b: int(a <= b),
    ">": lambda a, b: int(a > b),
    ">=": lambda a, b: int(a >= b),
}


def fold(op, a, b):
    """Value of a op b for 32-bit ints a and b, b nonzero for / and %."""
    return toInt32(foldOps[op](a, b))


def evaluate(exp, inFact):
    """
    Value of exp given the facts in inFact.

    Variables that cannot hold ints and expressions other than variables,
    literals and binary expressions are NAC.
    """
    if isinstance(exp, ir.Var):
        if canHoldInt(exp.type):
            return inFact.get(exp)
        return NAC

    if isinstance(exp, ir.IntLiteral):
        return Value.makeConstant(exp.value)

    if isinstance(exp, ir.BinaryExp):
        v1 = evaluate(exp.operand1, inFact)
        v2 = evaluate(exp.operand2, inFact)
        if exp.op in ("/", "%") and v2.isConstant() and v2.getConstant() == 0:
            return UNDEF
        if v1.isConstant() and v2.isConstant():
            return Value.makeConstant(fold(exp.op, v1.getConstant(), v2.getConstant()))
        if v1.isNAC() or v2.isNAC():
            return NAC
        return UNDEF

    return NAC


class ConstantPropagation(DataflowAnalysis):
    def newBoundaryFact(self, cfg):
        return self.boundaryFactOf(cfg.method)

    def boundaryFactOf(self, method):
        """Every int-like parameter of method is NAC."""
        fact = CPFact()
        if not method.isOpaque():
            for param in method.ir.getParams():
                if canHoldInt(param.type):
                    fact.update(param, NAC)
        return fact

    def newInitialFact(self):
        return CPFact()

    def meetInto(self, fact, target):
        for var, value in fact.items():
            target.update(var, meetValue(value, target.get(var)))

    def transferNode(self, node, inFact, outFact):
        result = inFact.copy()
        if isinstance(node, ir.Stmt):
            var = node.getDef()
            if var is not None and canHoldInt(var.type):
                result.update(var, evaluate(node.getRValue(), inFact))
        return outFact.copyFrom(result)


class InterConstantPropagation(InterDataflowAnalysis):
    def __init__(self):
        self.cp = ConstantPropagation()

    def newBoundaryFact(self, method):
        return self.cp.boundaryFactOf(method)

    def newInitialFact(self):
        return self.cp.newInitialFact()

    def meetInto(self, fact, target):
        self.cp.meetInto(fact, target)

    def transferCallNode(self, node, inFact, outFact):
        return outFact.copyFrom(inFact)

    def transferNonCallNode(self, node, inFact, outFact):
        return self.cp.transferNode(node, inFact, outFact)

    def transferNormalEdge(self, edge, out):
        return out

    def transferCallToReturnEdge(self, edge, out):
        # The result is defined by the return edges.
        fact = out.copy()
        result = edge.callSite.getResult()
        if result is not None:
            fact.remove(result)
        return fact

    def transferCallEdge(self, edge, callSiteOut):
        fact = self.newInitialFact()
        callee = edge.callee
        if callee.isOpaque():
            return fact

        args = edge.callSite.invokeExp.args
        params = callee.ir.getParams()
        if len(args) != len(params):
            raise ArityMismatchError(edge.callSite, callee, len(args), len(params))
        for arg, param in zip(args, params):
            if canHoldInt(param.type):
                fact.update(param, evaluate(arg, callSiteOut))
        return fact

    def transferReturnEdge(self, edge, returnOut):
        fact = self.newInitialFact()
        result = edge.callSite.getResult()
        if result is None or not canHoldInt(result.type):
            return fact

        if edge.callee.isOpaque():
            value = NAC
        else:
            value = UNDEF
            for var in edge.returnVars:
                value = meetValue(value, evaluate(var, returnOut))
        fact.update(result, value)
        return fact
