"""
Context-sensitive elements and the manager interning them.

Every element is created on first request and identified by an integer
handle (its index among the elements of its kind).  Requesting an element
with an equal key returns the same handle for the lifetime of the manager,
so elements compare and hash by identity.

Pointers (variables, static fields, instance fields and array indexes) each
own one PointsToSet, which only the solver updates.
"""

from ptaflow.util.canonical import Interner
from .pointsto import PointsToSet


class Pointer(object):
    __slots__ = "index", "pointsTo"

    def __init__(self, index):
        self.index = index
        self.pointsTo = PointsToSet()

    def getPointsToSet(self):
        return self.pointsTo


class CSVar(Pointer):
    __slots__ = "context", "var"

    def __init__(self, index, context, var):
        Pointer.__init__(self, index)
        self.context = context
        self.var = var

    def __repr__(self):
        return "%r:%r/%r" % (self.context, self.var.method, self.var)


class StaticField(Pointer):
    __slots__ = "field"

    def __init__(self, index, field):
        Pointer.__init__(self, index)
        self.field = field

    def __repr__(self):
        return repr(self.field)


class InstanceField(Pointer):
    __slots__ = "base", "field"

    def __init__(self, index, base, field):
        Pointer.__init__(self, index)
        self.base = base
        self.field = field

    def __repr__(self):
        return "%r.%s" % (self.base, self.field.name)


class ArrayIndex(Pointer):
    __slots__ = "array"

    def __init__(self, index, array):
        Pointer.__init__(self, index)
        self.array = array

    def __repr__(self):
        return "%r[*]" % (self.array,)


class CSObj(object):
    __slots__ = "index", "context", "obj"

    def __init__(self, index, context, obj):
        self.index = index
        self.context = context
        self.obj = obj

    def __repr__(self):
        return "%r:%r" % (self.context, self.obj)


class CSMethod(object):
    __slots__ = "index", "context", "method"

    def __init__(self, index, context, method):
        self.index = index
        self.context = context
        self.method = method

    def __repr__(self):
        return "%r:%r" % (self.context, self.method)


class CSCallSite(object):
    """
    Attributes:
        context: Context of the calling method
        callSite: The Invoke statement
        container: CSMethod containing the call site
    """
    __slots__ = "index", "context", "callSite", "container"

    def __init__(self, index, context, callSite, container):
        self.index = index
        self.context = context
        self.callSite = callSite
        self.container = container

    def __repr__(self):
        return "%r:%r" % (self.context, self.callSite)


class CSManager(object):
    def __init__(self):
        self.vars = Interner(CSVar)
        self.staticFields = Interner(StaticField)
        self.instanceFields = Interner(InstanceField)
        self.arrayIndexes = Interner(ArrayIndex)
        self.objs = Interner(CSObj)
        self.methods = Interner(CSMethod)
        self.callSites = Interner(self._makeCallSite)

    def _makeCallSite(self, index, context, callSite):
        return CSCallSite(index, context, callSite, self.getCSMethod(context, callSite.method))

    def getVarPtr(self, context, var):
        return self.vars.get(context, var)

    def getStaticField(self, field):
        return self.staticFields.get(field)

    def getInstanceField(self, base, field):
        return self.instanceFields.get(base, field)

    def getArrayIndex(self, array):
        return self.arrayIndexes.get(array)

    def getCSObj(self, heapContext, obj):
        return self.objs.get(heapContext, obj)

    def getCSMethod(self, context, method):
        return self.methods.get(context, method)

    def getCSCallSite(self, context, callSite):
        return self.callSites.get(context, callSite)

    # Lookups that never create an element.

    def findVarPtr(self, context, var):
        return self.vars.lookup(context, var)

    def findStaticField(self, field):
        return self.staticFields.lookup(field)

    def findInstanceField(self, base, field):
        return self.instanceFields.lookup(base, field)

    def findArrayIndex(self, array):
        return self.arrayIndexes.lookup(array)

    def getCSVars(self):
        return list(self.vars.values())

    def getStaticFields(self):
        return list(self.staticFields.values())

    def getInstanceFields(self):
        return list(self.instanceFields.values())

    def getArrayIndexes(self):
        return list(self.arrayIndexes.values())

    def getCSObjs(self):
        return list(self.objs.values())

    def getCSMethods(self):
        return list(self.methods.values())

    def getPointers(self):
        result = []
        for table in (self.vars, self.staticFields, self.instanceFields, self.arrayIndexes):
            result.extend(table.values())
        return result
