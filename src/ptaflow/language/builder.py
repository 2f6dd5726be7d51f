"""Programmatic construction of programs.

Loading programs from source or bytecode is left to the surrounding
framework; the analyses only need the model in classes and ir.  This module
builds that model directly, which is how tests and embedders describe the
programs they analyse.

Example:
    pb = ProgramBuilder()
    main = pb.newClass("Main").method("main", isStatic=True)
    x = main.var("x", INT)
    main.literal(x, 1)
    world = pb.build(main=main)
"""

from .classes import ClassHierarchy, JClass, JField, JMethod, MethodRef, Subsignature
from .types import VOID
from .program import World
from . import ir


class Label(object):
    __slots__ = "name"

    def __init__(self, name):
        self.name = name

    def __repr__(self):
        return "<label %s>" % (self.name,)


class ProgramBuilder(object):
    """Collects classes and method bodies and produces a World."""

    def __init__(self):
        self.hierarchy = ClassHierarchy()
        self.methodBuilders = []

    def newClass(self, name, superClass=None, interfaces=(), isInterface=False, isAbstract=False):
        if isinstance(superClass, ClassBuilder):
            superClass = superClass.jclass
        interfaces = [i.jclass if isinstance(i, ClassBuilder) else i for i in interfaces]
        jclass = JClass(name, superClass, interfaces, isInterface, isAbstract)
        self.hierarchy.addClass(jclass)
        return ClassBuilder(self, jclass)

    def newInterface(self, name, interfaces=()):
        return self.newClass(name, interfaces=interfaces, isInterface=True)

    def build(self, entries=None, main=None):
        """
        Finish every open method body and create the World.

        Args:
            entries: Entry methods (JMethod or MethodBuilder); defaults to
                [main]
            main: The main method, if any
        """
        for mb in self.methodBuilders:
            if not mb.finished:
                mb.finish()

        main = _method(main)
        if entries is None:
            entries = [main] if main is not None else []
        entries = [_method(e) for e in entries]
        return World(self.hierarchy, entries, main)


class ClassBuilder(object):
    def __init__(self, program, jclass):
        self.program = program
        self.jclass = jclass

    def field(self, name, type, isStatic=False):
        return self.jclass.addField(JField(self.jclass, name, type, isStatic))

    def declare(self, name, paramTypes=(), returnType=VOID, isStatic=False,
                isAbstract=False, isNative=False):
        """Declare a method without a body."""
        subsig = Subsignature(name, paramTypes, returnType)
        method = JMethod(self.jclass, subsig, isStatic, isAbstract, isNative)
        return self.jclass.addMethod(method)

    def method(self, name, paramTypes=(), returnType=VOID, isStatic=False, paramNames=None):
        """Declare a method and return a MethodBuilder for its body."""
        method = self.declare(name, paramTypes, returnType, isStatic)
        mb = MethodBuilder(method, paramNames)
        self.program.methodBuilders.append(mb)
        return mb

    def ref(self, name, paramTypes=(), returnType=VOID):
        """Method reference naming this class, as a call site would."""
        return MethodRef(self.jclass, Subsignature(name, paramTypes, returnType))


class MethodBuilder(object):
    """
    Appends statements to the body of one method.

    Branch targets are Labels; mark(label) binds a label to the next
    statement appended.  finish() resolves labels, appends a Nop for labels
    bound past the last statement and a void Return if the body can fall
    off its end, then numbers statements and variables.
    """

    def __init__(self, method, paramNames=None):
        self.method = method
        self.vars = []
        self.stmts = []
        self.labels = {}
        self.jumps = []
        self.lineNumber = 1
        self.finished = False

        if method.isStatic:
            self.this = None
        else:
            self.this = self.var("this", method.declaringClass)

        if paramNames is None:
            paramNames = ["p%d" % i for i in range(len(method.paramTypes))]
        assert len(paramNames) == len(method.paramTypes), paramNames
        self.params = tuple(self.var(n, t) for n, t in zip(paramNames, method.paramTypes))

    def param(self, i):
        return self.params[i]

    def var(self, name, type):
        v = ir.Var(name, type, self.method, len(self.vars))
        self.vars.append(v)
        return v

    def append(self, stmt):
        assert not self.finished, self.method
        stmt.lineNumber = self.lineNumber
        self.lineNumber += 1
        self.stmts.append(stmt)
        return stmt

    def new(self, lhs, type):
        return self.append(ir.New(lhs, ir.NewExp(type)))

    def literal(self, lhs, value):
        return self.append(ir.AssignLiteral(lhs, ir.IntLiteral(value)))

    def copy(self, lhs, rhs):
        return self.append(ir.Copy(lhs, rhs))

    def binary(self, lhs, op, operand1, operand2):
        return self.append(ir.Binary(lhs, ir.BinaryExp(op, _operand(operand1), _operand(operand2))))

    def loadField(self, lhs, base, field):
        return self.append(ir.LoadField(lhs, ir.FieldAccess(base, field)))

    def storeField(self, base, field, rhs):
        return self.append(ir.StoreField(ir.FieldAccess(base, field), rhs))

    def loadStatic(self, lhs, field):
        return self.loadField(lhs, None, field)

    def storeStatic(self, field, rhs):
        return self.storeField(None, field, rhs)

    def loadArray(self, lhs, base, index):
        return self.append(ir.LoadArray(lhs, ir.ArrayAccess(base, index)))

    def storeArray(self, base, index, rhs):
        return self.append(ir.StoreArray(ir.ArrayAccess(base, index), rhs))

    def invoke(self, kind, target, base, args=(), result=None):
        if isinstance(target, JMethod):
            target = target.ref()
        elif isinstance(target, MethodBuilder):
            target = target.method.ref()
        return self.append(ir.Invoke(result, ir.InvokeExp(kind, target, base, args)))

    def invokeStatic(self, target, args=(), result=None):
        return self.invoke(ir.CallKind.STATIC, target, None, args, result)

    def invokeSpecial(self, target, base, args=(), result=None):
        return self.invoke(ir.CallKind.SPECIAL, target, base, args, result)

    def invokeVirtual(self, target, base, args=(), result=None):
        return self.invoke(ir.CallKind.VIRTUAL, target, base, args, result)

    def invokeInterface(self, target, base, args=(), result=None):
        return self.invoke(ir.CallKind.INTERFACE, target, base, args, result)

    def ret(self, value=None):
        return self.append(ir.Return(value))

    def nop(self):
        return self.append(ir.Nop())

    def label(self, name="L"):
        return Label(name)

    def mark(self, label):
        assert label not in self.labels, label
        self.labels[label] = len(self.stmts)

    def ifGoto(self, op, operand1, operand2, label):
        stmt = self.append(ir.If(ir.BinaryExp(op, _operand(operand1), _operand(operand2)), None))
        self.jumps.append((stmt, label))
        return stmt

    def goto(self, label):
        stmt = self.append(ir.Goto(None))
        self.jumps.append((stmt, label))
        return stmt

    def finish(self):
        assert not self.finished, self.method

        if any(pos == len(self.stmts) for pos in self.labels.values()):
            self.nop()
        if not self.stmts or self.stmts[-1].canFallThrough():
            self.ret()

        for stmt, label in self.jumps:
            if label not in self.labels:
                raise ValueError("label %s of %r is never marked" % (label.name, self.method))
            stmt.target = self.stmts[self.labels[label]]

        for i, stmt in enumerate(self.stmts):
            stmt.index = i
            stmt.method = self.method
            _indexUses(stmt)

        self.finished = True
        self.method.ir = ir.MethodIR(self.method, self.this, self.params, self.stmts, self.vars)
        return self.method.ir


def _operand(value):
    if isinstance(value, int):
        return ir.IntLiteral(value)
    return value


def _method(m):
    return m.method if isinstance(m, MethodBuilder) else m


def _indexUses(stmt):
    if isinstance(stmt, ir.LoadField):
        if not stmt.isStatic():
            stmt.rvalue.base.loadFields.append(stmt)
    elif isinstance(stmt, ir.StoreField):
        if not stmt.isStatic():
            stmt.lvalue.base.storeFields.append(stmt)
    elif isinstance(stmt, ir.LoadArray):
        stmt.rvalue.base.loadArrays.append(stmt)
    elif isinstance(stmt, ir.StoreArray):
        stmt.lvalue.base.storeArrays.append(stmt)
    elif isinstance(stmt, ir.Invoke):
        if not stmt.isStatic():
            stmt.invokeExp.base.invokes.append(stmt)
