"""Classes, members and the class hierarchy.

The class hierarchy is the query capability both call graph builders need:
class lookup, the superclass link, the direct subtypes of a class and
dispatch of a subsignature on a class.

Inheritance is kept in a networkx DiGraph with an edge from every supertype
to each of its direct subtypes.  The ``kind`` edge attribute is "extends"
(class to subclass, interface to subinterface) or "implements" (interface
to implementing class).
"""

import networkx as nx

from ptaflow.util.canonical import CanonicalObject
from .types import Type, VOID


class Subsignature(CanonicalObject):
    """Name, parameter types and return type of a method, without its class.

    Attributes:
        name: Method name
        paramTypes: Tuple of parameter types
        returnType: Return type
    """
    __slots__ = "name", "paramTypes", "returnType"

    def __init__(self, name, paramTypes=(), returnType=VOID):
        self.name = name
        self.paramTypes = tuple(paramTypes)
        self.returnType = returnType
        self.setCanonical(name, self.paramTypes, returnType)

    def __repr__(self):
        return "%r %s(%s)" % (
            self.returnType,
            self.name,
            ",".join([repr(t) for t in self.paramTypes]),
        )


class MethodRef(CanonicalObject):
    """Symbolic reference to a method, as it appears at a call site.

    Attributes:
        declaringClass: The class named by the reference
        subsignature: The referenced subsignature
    """
    __slots__ = "declaringClass", "subsignature"

    def __init__(self, declaringClass, subsignature):
        self.declaringClass = declaringClass
        self.subsignature = subsignature
        self.setCanonical(declaringClass, subsignature)

    def __repr__(self):
        return "<%s: %r>" % (self.declaringClass.name, self.subsignature)


class JField(object):
    __slots__ = "declaringClass", "name", "type", "isStatic"

    def __init__(self, declaringClass, name, type, isStatic=False):
        self.declaringClass = declaringClass
        self.name = name
        self.type = type
        self.isStatic = isStatic

    def __repr__(self):
        return "<%s: %r %s>" % (self.declaringClass.name, self.type, self.name)


class JMethod(object):
    """A method declared in a class.

    A method is opaque when it has no body to analyse (abstract or native);
    the analyses never look inside opaque methods.

    Attributes:
        declaringClass: The declaring JClass
        subsignature: The method's Subsignature
        isStatic: True for static methods
        isAbstract: True for abstract methods
        isNative: True for native methods
        ir: The MethodIR of the body, None until one is attached
    """
    __slots__ = "declaringClass", "subsignature", "isStatic", "isAbstract", "isNative", "ir"

    def __init__(self, declaringClass, subsignature, isStatic=False,
                 isAbstract=False, isNative=False):
        self.declaringClass = declaringClass
        self.subsignature = subsignature
        self.isStatic = isStatic
        self.isAbstract = isAbstract
        self.isNative = isNative
        self.ir = None

    @property
    def name(self):
        return self.subsignature.name

    @property
    def paramTypes(self):
        return self.subsignature.paramTypes

    @property
    def returnType(self):
        return self.subsignature.returnType

    def getIR(self):
        return self.ir

    def isOpaque(self):
        return self.ir is None

    def ref(self):
        return MethodRef(self.declaringClass, self.subsignature)

    def __repr__(self):
        return "<%s: %r>" % (self.declaringClass.name, self.subsignature)


class JClass(Type):
    """A class or interface.

    Attributes:
        name: Fully qualified name
        superClass: Direct superclass, None for a root class or interface
        interfaces: Directly implemented (or, for an interface, extended)
            interfaces
        isInterface: True for interfaces
        isAbstract: True for abstract classes and interfaces
    """
    __slots__ = "name", "superClass", "interfaces", "isInterface", "isAbstract", \
        "declaredMethods", "declaredFields"

    def __init__(self, name, superClass=None, interfaces=(), isInterface=False, isAbstract=False):
        self.name = name
        self.superClass = superClass
        self.interfaces = tuple(interfaces)
        self.isInterface = isInterface
        self.isAbstract = isAbstract or isInterface
        self.declaredMethods = {}
        self.declaredFields = {}

    def isReference(self):
        return True

    def getSuperClass(self):
        return self.superClass

    def getDeclaredMethod(self, subsignature):
        return self.declaredMethods.get(subsignature)

    def getDeclaredMethods(self):
        return list(self.declaredMethods.values())

    def getDeclaredField(self, name):
        return self.declaredFields.get(name)

    def addMethod(self, method):
        assert method.declaringClass is self, method
        self.declaredMethods[method.subsignature] = method
        return method

    def addField(self, field):
        assert field.declaringClass is self, field
        self.declaredFields[field.name] = field
        return field

    def __repr__(self):
        return self.name


class ClassHierarchy(object):
    """Index over all classes of a program.

    Attributes:
        classes: Mapping from class name to JClass
        graph: Inheritance graph, supertype -> direct subtype
    """

    def __init__(self):
        self.classes = {}
        self.graph = nx.DiGraph()

    def addClass(self, jclass):
        if jclass.name in self.classes:
            raise ValueError("class %s is already defined" % jclass.name)
        self.classes[jclass.name] = jclass
        self.graph.add_node(jclass)

        if jclass.superClass is not None:
            self.graph.add_edge(jclass.superClass, jclass, kind="extends")

        for iface in jclass.interfaces:
            assert iface.isInterface, iface
            kind = "extends" if jclass.isInterface else "implements"
            self.graph.add_edge(iface, jclass, kind=kind)

        return jclass

    def getClass(self, name):
        return self.classes.get(name)

    def allClasses(self):
        return list(self.classes.values())

    def _directSubtypes(self, jclass, kind, wantInterface):
        if jclass not in self.graph:
            return []
        return [
            sub
            for sub, data in self.graph.adj[jclass].items()
            if data["kind"] == kind and sub.isInterface == wantInterface
        ]

    def getDirectSubclassesOf(self, jclass):
        if jclass.isInterface:
            return []
        return self._directSubtypes(jclass, "extends", False)

    def getDirectSubinterfacesOf(self, jclass):
        if not jclass.isInterface:
            return []
        return self._directSubtypes(jclass, "extends", True)

    def getDirectImplementorsOf(self, jclass):
        if not jclass.isInterface:
            return []
        return self._directSubtypes(jclass, "implements", False)

    def isSubtype(self, supertype, subtype):
        return supertype is subtype or (
            supertype in self.graph and subtype in self.graph
            and nx.has_path(self.graph, supertype, subtype)
        )

    def dispatch(self, jclass, subsignature):
        """
        Find the concrete method subsignature dispatches to on jclass.

        Walks from jclass up the superclass chain and returns the first
        declared, non-abstract method matching subsignature.

        Returns:
            JMethod, or None when no class on the chain has one
        """
        while jclass is not None:
            method = jclass.getDeclaredMethod(subsignature)
            if method is not None and not method.isAbstract:
                return method
            jclass = jclass.superClass
        return None

    def resolveMethod(self, methodRef):
        """
        Find the declaration a method reference statically binds to.

        Looks in the referenced class, then its superclasses, then the
        interfaces of all of them.

        Returns:
            JMethod, or None if the reference names no declared method
        """
        jclass = methodRef.declaringClass
        subsignature = methodRef.subsignature
        chain = []
        while jclass is not None:
            method = jclass.getDeclaredMethod(subsignature)
            if method is not None:
                return method
            chain.append(jclass)
            jclass = jclass.superClass

        for jclass in chain:
            for ancestor in nx.ancestors(self.graph, jclass):
                if ancestor.isInterface:
                    method = ancestor.getDeclaredMethod(subsignature)
                    if method is not None:
                        return method
        return None
