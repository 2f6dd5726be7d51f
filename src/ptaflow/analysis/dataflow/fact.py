"""
Dataflow facts and results.

A MapFact maps keys (variables) to lattice values.  Keys absent from the
map hold the lattice bottom, so a bottom value is never stored.
"""


class MapFact(object):
    __slots__ = "map"
    bottom = None

    def __init__(self, mapping=None):
        self.map = {}
        if mapping:
            for key, value in mapping.items():
                self.update(key, value)

    def get(self, key):
        return self.map.get(key, self.bottom)

    def update(self, key, value):
        """Bind key to value.  Returns True if the fact changed."""
        if value == self.bottom:
            return self.remove(key)
        if self.map.get(key) == value:
            return False
        self.map[key] = value
        return True

    def remove(self, key):
        return self.map.pop(key, self.bottom) != self.bottom

    def copy(self):
        fact = type(self)()
        fact.map = dict(self.map)
        return fact

    def copyFrom(self, other):
        """Replace the contents by those of other.  Returns True if changed."""
        if self.map == other.map:
            return False
        self.map = dict(other.map)
        return True

    def keys(self):
        return self.map.keys()

    def items(self):
        return self.map.items()

    def __eq__(self, other):
        return type(self) == type(other) and self.map == other.map

    def __ne__(self, other):
        return not self == other

    __hash__ = None

    def __len__(self):
        return len(self.map)

    def __repr__(self):
        return "{%s}" % ", ".join(
            ["%r=%r" % (key, value) for key, value in self.map.items()]
        )


class DataflowResult(object):
    """
    IN and OUT facts of every node.

    Nodes the solver never reached answer with a fresh initial fact.
    """

    def __init__(self, newInitialFact):
        self.newInitialFact = newInitialFact
        self.inFacts = {}
        self.outFacts = {}

    def getInFact(self, node):
        fact = self.inFacts.get(node)
        return fact if fact is not None else self.newInitialFact()

    def getOutFact(self, node):
        fact = self.outFacts.get(node)
        return fact if fact is not None else self.newInitialFact()

    def setInFact(self, node, fact):
        self.inFacts[node] = fact

    def setOutFact(self, node, fact):
        self.outFacts[node] = fact

    def getResult(self, node):
        return self.getOutFact(node)
