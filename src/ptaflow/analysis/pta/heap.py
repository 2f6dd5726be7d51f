"""
Heap abstraction.

Objects are abstracted by their allocation site: every execution of one
New statement yields the same abstract object.
"""

from ptaflow.util.canonical import Interner


class Obj(object):
    """
    Abstract object of one allocation site.

    Attributes:
        index: Handle of the object in its heap model
        allocSite: The New statement
        type: Type of the allocated object
        containerMethod: Method containing allocSite
    """
    __slots__ = "index", "allocSite", "type", "containerMethod"

    def __init__(self, index, allocSite):
        self.index = index
        self.allocSite = allocSite
        self.type = allocSite.rvalue.type
        self.containerMethod = allocSite.method

    def getContainerType(self):
        return self.containerMethod.declaringClass

    def __repr__(self):
        return "NewObj{%r[%d@L%d] %r}" % (
            self.containerMethod,
            self.allocSite.index,
            self.allocSite.lineNumber,
            self.type,
        )


class AllocationSiteHeapModel(object):
    def __init__(self):
        self.objs = Interner(Obj)

    def getObj(self, allocSite):
        return self.objs.get(allocSite)

    def getObjects(self):
        return list(self.objs.values())
