"""Types of the analysed object-oriented language.

Reference types are the classes themselves (see classes.JClass); this module
holds the primitive types, void and array types.
"""

from ptaflow.util.canonical import CanonicalObject


class Type(object):
    __slots__ = ()

    def isPrimitive(self):
        return False

    def isReference(self):
        return False


class PrimitiveType(Type):
    __slots__ = "name"

    def __init__(self, name):
        self.name = name

    def isPrimitive(self):
        return True

    def __repr__(self):
        return self.name


class VoidType(Type):
    __slots__ = ()

    def __repr__(self):
        return "void"


class ArrayType(CanonicalObject, Type):
    """Array of elementType; equal element types give equal array types."""
    __slots__ = "elementType"

    def __init__(self, elementType):
        self.elementType = elementType
        self.setCanonical(elementType)

    def isReference(self):
        return True

    def __repr__(self):
        return "%r[]" % (self.elementType,)


BYTE = PrimitiveType("byte")
SHORT = PrimitiveType("short")
INT = PrimitiveType("int")
CHAR = PrimitiveType("char")
BOOLEAN = PrimitiveType("boolean")
LONG = PrimitiveType("long")
FLOAT = PrimitiveType("float")
DOUBLE = PrimitiveType("double")

VOID = VoidType()

# Types whose values constant propagation tracks.
intLikeTypes = frozenset((BYTE, SHORT, INT, CHAR, BOOLEAN))


def canHoldInt(t):
    return t in intLikeTypes
