"""Type-based dispatch for visitors over closed node hierarchies.

A TypeDispatcher subclass declares one handler per node class with
@dispatch(...) and exactly one fallback with @defaultdispatch.  Calling the
dispatcher with a node selects the handler for the node's class (searching
the MRO once and caching the result).  Visitors over the IR statement
classes use the default fallback to reject statement kinds they do not know,
which makes the set of handled kinds explicit.
"""

__all__ = [
    "TypeDispatcher",
    "defaultdispatch",
    "dispatch",
    "TypeDispatchError",
    "TypeDispatchDeclarationError",
]

import inspect


class TypeDispatchError(Exception):
    """Raised when a dispatcher is called with a type it cannot handle."""
    pass


class TypeDispatchDeclarationError(Exception):
    """Raised when a dispatcher class declares its handlers incorrectly."""
    pass


def flattenTypesInto(l, result):
    for child in l:
        if isinstance(child, (list, tuple)):
            flattenTypesInto(child, result)
        else:
            if not isinstance(child, type):
                raise TypeDispatchDeclarationError(
                    "Expected a type, got %r instead." % child
                )
            result.append(child)


def dispatch(*types):
    """Mark a method as the handler for the given node classes."""
    def dispatchF(f):
        def dispatchWrap(*args, **kargs):
            return f(*args, **kargs)

        dispatchWrap.__original__ = f
        dispatchWrap.__dispatch__ = []
        flattenTypesInto(types, dispatchWrap.__dispatch__)
        return dispatchWrap

    return dispatchF


def defaultdispatch(f):
    """Mark a method as the fallback handler."""
    def defaultWrap(*args, **kargs):
        return f(*args, **kargs)

    defaultWrap.__original__ = f
    defaultWrap.__dispatch__ = (None,)
    return defaultWrap


def dispatch__call__(self, p, *args):
    t = type(p)
    table = self.__typeDispatchTable__

    func = table.get(t)

    if func is None:
        # Only happens once per class, the result is cached below.
        for supercls in t.mro():
            func = table.get(supercls)
            if func is not None:
                break

        if func is None:
            func = table.get(None)

        table[t] = func

    return func(self, p, *args)


def exceptionDefault(self, node, *args):
    raise TypeDispatchError("%r cannot handle %r\n%r" % (type(self), type(node), node))


def inlineAncestor(t, lut):
    if hasattr(t, "__typeDispatchTable__"):
        for k, v in t.__typeDispatchTable__.items():
            if k not in lut:
                lut[k] = v


class typedispatcher(type):
    """Metaclass building the type -> handler table of a TypeDispatcher."""

    def __new__(self, name, bases, d):
        lut = {}
        restore = {}

        for k, v in d.items():
            if hasattr(v, "__dispatch__") and hasattr(v, "__original__"):
                original = v.__original__
                for t in v.__dispatch__:
                    if t in lut:
                        raise TypeDispatchDeclarationError(
                            "%s has declared with multiple handlers for type %s"
                            % (name, "default" if t is None else t.__name__)
                        )
                    lut[t] = original
                restore[k] = original

        d.update(restore)

        # Subclasses inherit handlers but may override them.
        for base in bases:
            for t in inspect.getmro(base):
                inlineAncestor(t, lut)

        if None not in lut:
            raise TypeDispatchDeclarationError("%s has no default dispatch" % (name,))

        d["__typeDispatchTable__"] = lut

        return type.__new__(self, name, bases, d)


class TypeDispatcher(object, metaclass=typedispatcher):
    """
    Base class for type-based method dispatch.

    Example:
        >>> class Kind(TypeDispatcher):
        ...     @dispatch(int)
        ...     def visitInt(self, node):
        ...         return "int"
        ...     @defaultdispatch
        ...     def visitOther(self, node):
        ...         return "other"
        >>> Kind()(3), Kind()("x")
        ('int', 'other')

    Without its own @defaultdispatch a subclass falls back to
    exceptionDefault, which raises TypeDispatchError.
    """
    __call__ = dispatch__call__
    exceptionDefault = defaultdispatch(exceptionDefault)
