"""
The World: a read-only handle on the program under analysis.

Analyses receive the World explicitly instead of reaching for a global
"current program".
"""


class World(object):
    """
    Attributes:
        hierarchy: ClassHierarchy of all classes
        entryMethods: Methods the whole-program run starts from
        mainMethod: The main method, or None
    """
    __slots__ = "hierarchy", "entryMethods", "mainMethod"

    def __init__(self, hierarchy, entryMethods, mainMethod=None):
        self.hierarchy = hierarchy
        self.entryMethods = tuple(entryMethods)
        self.mainMethod = mainMethod

    def getClassHierarchy(self):
        return self.hierarchy

    def getEntryMethods(self):
        return self.entryMethods

    def getMainMethod(self):
        return self.mainMethod
