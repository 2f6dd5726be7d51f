"""
Contexts and context selectors.

A Context is a bounded sequence of context elements (call sites, heap
objects or types, depending on the selector).  A ContextSelector decides the
context of every callee and of every allocated object; k-limiting keeps only
the most recent k elements, so the set of contexts of a finite program is
finite.

Selectors are interchangeable; the solver only calls:

- emptyContext()
- selectContext(csCallSite, recvObj, callee), recvObj is None for static
  calls
- selectHeapContext(csMethod, obj)
"""

import re

from ptaflow.application.errors import ConfigurationError
from ptaflow.util.canonical import CanonicalObject, CanonicalCache


class Context(CanonicalObject):
    """Sequence of context elements, oldest first."""
    __slots__ = ()

    def __init__(self, *elements):
        self.setCanonical(*elements)

    @property
    def elements(self):
        return self.canonical

    def __len__(self):
        return len(self.canonical)

    def __repr__(self):
        return "[%s]" % ", ".join([repr(e) for e in self.canonical])


class ContextSelector(object):
    """
    Base class of the context selectors.

    Attributes:
        k: Bound on method context length
        hk: Bound on heap context length
    """
    name = None

    def __init__(self, k=0, hk=None):
        self.k = k
        self.hk = max(k - 1, 0) if hk is None else hk
        self.contexts = CanonicalCache(Context)
        self.empty = self.contexts()

    def emptyContext(self):
        return self.empty

    def makeContext(self, elements, limit):
        """Context of the last limit elements of elements."""
        if limit <= 0:
            return self.empty
        return self.contexts(*elements[-limit:])

    def append(self, context, element, limit):
        return self.makeContext(context.elements + (element,), limit)

    def selectContext(self, csCallSite, recvObj, callee):
        raise NotImplementedError

    def selectHeapContext(self, csMethod, obj):
        return self.makeContext(csMethod.context.elements, self.hk)

    def __repr__(self):
        return "%s(k=%d, hk=%d)" % (type(self).__name__, self.k, self.hk)


class ContextInsensitiveSelector(ContextSelector):
    name = "ci"

    def __init__(self):
        ContextSelector.__init__(self, 0, 0)

    def selectContext(self, csCallSite, recvObj, callee):
        return self.empty

    def selectHeapContext(self, csMethod, obj):
        return self.empty


class CallSiteSelector(ContextSelector):
    """k-call-site sensitivity: the last k call sites."""
    name = "call"

    def selectContext(self, csCallSite, recvObj, callee):
        return self.append(csCallSite.context, csCallSite.callSite, self.k)


class ObjectSelector(ContextSelector):
    """
    k-object sensitivity: the receiver object and its heap context.

    Static calls keep the caller's context.
    """
    name = "obj"

    def selectContext(self, csCallSite, recvObj, callee):
        if recvObj is None:
            return csCallSite.context
        return self.append(recvObj.context, recvObj.obj, self.k)


class TypeSelector(ContextSelector):
    """
    k-type sensitivity: like k-object, but each receiver object is replaced
    by the class declaring the method that allocated it.
    """
    name = "type"

    def selectContext(self, csCallSite, recvObj, callee):
        if recvObj is None:
            return csCallSite.context
        return self.append(recvObj.context, recvObj.obj.getContainerType(), self.k)


selectorTypes = dict(
    (cls.name, cls) for cls in (CallSiteSelector, ObjectSelector, TypeSelector)
)

selectorPattern = re.compile(r"^(\d+)-(\w+)$")


def makeSelector(cs, heapDepth=None):
    """
    Build a selector from its name.

    Args:
        cs: "ci", or "<k>-call", "<k>-obj", "<k>-type" with k >= 1
        heapDepth: Heap context length, None for k-1

    Raises:
        ConfigurationError: cs names no selector
    """
    if cs == ContextInsensitiveSelector.name:
        return ContextInsensitiveSelector()

    match = selectorPattern.match(cs)
    if match is None or match.group(2) not in selectorTypes:
        raise ConfigurationError("unknown context sensitivity %r" % (cs,))

    k = int(match.group(1))
    if k < 1:
        raise ConfigurationError("context length of %r must be at least 1" % (cs,))
    return selectorTypes[match.group(2)](k, heapDepth)
