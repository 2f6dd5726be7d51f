"""Three-address intermediate representation of method bodies.

A method body (MethodIR) is an ordered list of statements.  The statement
classes form a closed set; analyses handle them with a TypeDispatcher whose
default handler rejects any other class.

Every variable records the statements that use it as the base of an
instance field access, an array access or a method call, so the pointer
analysis can find them once the objects the variable points to are known.
"""

from enum import Enum

from .types import INT, BOOLEAN


class CallKind(Enum):
    STATIC = "static"
    SPECIAL = "special"
    VIRTUAL = "virtual"
    INTERFACE = "interface"


# Binary operators, grouped by the kind of result they produce.
arithmeticOps = frozenset(("+", "-", "*", "/", "%"))
bitwiseOps = frozenset(("&", "|", "^"))
shiftOps = frozenset(("<<", ">>", ">>>"))
conditionOps = frozenset(("==", "!=", "<", "<=", ">", ">="))
binaryOps = arithmeticOps | bitwiseOps | shiftOps | conditionOps


class Exp(object):
    __slots__ = ()


class Var(Exp):
    """A local variable of one method.

    Attributes:
        name: Source-level name
        type: Declared type
        method: The JMethod declaring the variable
        index: Position in MethodIR.getVars()
        loadFields: LoadField statements with this variable as base
        storeFields: StoreField statements with this variable as base
        loadArrays: LoadArray statements with this variable as base
        storeArrays: StoreArray statements with this variable as base
        invokes: Invoke statements with this variable as receiver
    """
    __slots__ = "name", "type", "method", "index", \
        "loadFields", "storeFields", "loadArrays", "storeArrays", "invokes"

    def __init__(self, name, type, method, index):
        self.name = name
        self.type = type
        self.method = method
        self.index = index
        self.loadFields = []
        self.storeFields = []
        self.loadArrays = []
        self.storeArrays = []
        self.invokes = []

    def __repr__(self):
        return self.name


class IntLiteral(Exp):
    __slots__ = "value"

    def __init__(self, value):
        self.value = value

    @property
    def type(self):
        return INT

    def __repr__(self):
        return repr(self.value)


class BinaryExp(Exp):
    __slots__ = "op", "operand1", "operand2"

    def __init__(self, op, operand1, operand2):
        if op not in binaryOps:
            raise ValueError("unknown binary operator %r" % (op,))
        self.op = op
        self.operand1 = operand1
        self.operand2 = operand2

    @property
    def type(self):
        return BOOLEAN if self.op in conditionOps else INT

    def __repr__(self):
        return "%r %s %r" % (self.operand1, self.op, self.operand2)


class NewExp(Exp):
    __slots__ = "type"

    def __init__(self, type):
        self.type = type

    def __repr__(self):
        return "new %r" % (self.type,)


class FieldAccess(Exp):
    """Access to field; base is None for a static field."""
    __slots__ = "base", "field"

    def __init__(self, base, field):
        assert (base is None) == field.isStatic, field
        self.base = base
        self.field = field

    def isStatic(self):
        return self.base is None

    def __repr__(self):
        if self.base is None:
            return "%s.%s" % (self.field.declaringClass.name, self.field.name)
        return "%r.%s" % (self.base, self.field.name)


class ArrayAccess(Exp):
    __slots__ = "base", "index"

    def __init__(self, base, index):
        self.base = base
        self.index = index

    def __repr__(self):
        return "%r[%r]" % (self.base, self.index)


class InvokeExp(Exp):
    """Method call; base is None for static calls.

    Attributes:
        kind: CallKind of the call
        methodRef: The MethodRef the call names
        base: Receiver variable
        args: Tuple of argument variables
    """
    __slots__ = "kind", "methodRef", "base", "args"

    def __init__(self, kind, methodRef, base, args):
        assert (base is None) == (kind is CallKind.STATIC), kind
        self.kind = kind
        self.methodRef = methodRef
        self.base = base
        self.args = tuple(args)

    def isStatic(self):
        return self.kind is CallKind.STATIC

    def __repr__(self):
        args = ", ".join([repr(arg) for arg in self.args])
        if self.base is None:
            return "%s %r(%s)" % (self.kind.value, self.methodRef, args)
        return "%s %r.%r(%s)" % (self.kind.value, self.base, self.methodRef, args)


class Stmt(object):
    """Base class of statements.

    index, method and lineNumber are assigned when the owning MethodIR is
    built.
    """
    __slots__ = "index", "method", "lineNumber"

    def __init__(self):
        self.index = -1
        self.method = None
        self.lineNumber = -1

    def getDef(self):
        """The variable this statement assigns, if any."""
        return None

    def canFallThrough(self):
        return True

    def __repr__(self):
        return "%d@L%d: %s" % (self.index, self.lineNumber, self.text())

    def text(self):
        return type(self).__name__


class DefinitionStmt(Stmt):
    __slots__ = "lvalue", "rvalue"

    def __init__(self, lvalue, rvalue):
        Stmt.__init__(self)
        self.lvalue = lvalue
        self.rvalue = rvalue

    def getLValue(self):
        return self.lvalue

    def getRValue(self):
        return self.rvalue

    def getDef(self):
        return self.lvalue if isinstance(self.lvalue, Var) else None

    def text(self):
        return "%r = %r" % (self.lvalue, self.rvalue)


class New(DefinitionStmt):
    __slots__ = ()


class AssignLiteral(DefinitionStmt):
    __slots__ = ()


class Copy(DefinitionStmt):
    __slots__ = ()


class Binary(DefinitionStmt):
    __slots__ = ()


class LoadField(DefinitionStmt):
    __slots__ = ()

    @property
    def field(self):
        return self.rvalue.field

    def isStatic(self):
        return self.rvalue.isStatic()


class StoreField(DefinitionStmt):
    __slots__ = ()

    @property
    def field(self):
        return self.lvalue.field

    def isStatic(self):
        return self.lvalue.isStatic()


class LoadArray(DefinitionStmt):
    __slots__ = ()


class StoreArray(DefinitionStmt):
    __slots__ = ()


class Invoke(DefinitionStmt):
    """Call statement; lvalue is None when the result is discarded."""
    __slots__ = ()

    def __init__(self, result, invokeExp):
        DefinitionStmt.__init__(self, result, invokeExp)

    @property
    def invokeExp(self):
        return self.rvalue

    @property
    def methodRef(self):
        return self.rvalue.methodRef

    def getResult(self):
        return self.lvalue

    def isStatic(self):
        return self.rvalue.isStatic()

    def text(self):
        if self.lvalue is None:
            return repr(self.rvalue)
        return DefinitionStmt.text(self)


class Return(Stmt):
    """Return statement; value is None for a void return."""
    __slots__ = "value"

    def __init__(self, value=None):
        Stmt.__init__(self)
        self.value = value

    def canFallThrough(self):
        return False

    def text(self):
        return "return" if self.value is None else "return %r" % (self.value,)


class If(Stmt):
    """Conditional jump to target when condition holds."""
    __slots__ = "condition", "target"

    def __init__(self, condition, target):
        Stmt.__init__(self)
        self.condition = condition
        self.target = target

    def text(self):
        return "if (%r) goto %d" % (self.condition, self.target.index)


class Goto(Stmt):
    __slots__ = "target"

    def __init__(self, target):
        Stmt.__init__(self)
        self.target = target

    def canFallThrough(self):
        return False

    def text(self):
        return "goto %d" % (self.target.index,)


class Nop(Stmt):
    __slots__ = ()

    def text(self):
        return "nop"


class MethodIR(object):
    """Body of one method.

    Attributes:
        method: The JMethod this body belongs to
        thisVar: The receiver variable, None for static methods
        params: Tuple of parameter variables, without the receiver
        stmts: Statements in order, stmts[i].index == i
        vars: All variables, vars[i].index == i
    """
    __slots__ = "method", "thisVar", "params", "stmts", "vars"

    def __init__(self, method, thisVar, params, stmts, vars):
        self.method = method
        self.thisVar = thisVar
        self.params = tuple(params)
        self.stmts = list(stmts)
        self.vars = list(vars)

    def getThis(self):
        return self.thisVar

    def getParams(self):
        return self.params

    def getParam(self, i):
        return self.params[i]

    def getStmts(self):
        return self.stmts

    def getVars(self):
        return self.vars

    def getReturnVars(self):
        result = []
        for stmt in self.stmts:
            if isinstance(stmt, Return) and stmt.value is not None and stmt.value not in result:
                result.append(stmt.value)
        return result

    def __iter__(self):
        return iter(self.stmts)

    def __len__(self):
        return len(self.stmts)
