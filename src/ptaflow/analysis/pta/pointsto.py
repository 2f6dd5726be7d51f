"""
Points-to sets.

A points-to set holds context-sensitive objects (CSObj handles).  Sets only
grow: there is no removal operation.
"""


class PointsToSet(object):
    __slots__ = "objs"

    def __init__(self, objs=()):
        # dict keys keep insertion order, so iteration is deterministic.
        self.objs = dict.fromkeys(objs)

    @classmethod
    def singleton(cls, obj):
        return cls((obj,))

    def addObject(self, obj):
        """Add obj.  Returns True if it was not already present."""
        if obj in self.objs:
            return False
        self.objs[obj] = None
        return True

    def addAll(self, other):
        """Add every object of other.  Returns the set of added objects."""
        added = PointsToSet()
        for obj in other:
            if self.addObject(obj):
                added.objs[obj] = None
        return added

    def contains(self, obj):
        return obj in self.objs

    def objects(self):
        return list(self.objs)

    def isEmpty(self):
        return not self.objs

    def difference(self, other):
        """Objects of other that are not in self.  Neither set is changed."""
        return PointsToSet(obj for obj in other if obj not in self.objs)

    def copy(self):
        return PointsToSet(self.objs)

    def __contains__(self, obj):
        return obj in self.objs

    def __iter__(self):
        return iter(self.objs)

    def __len__(self):
        return len(self.objs)

    def __repr__(self):
        return "{%s}" % ", ".join([repr(obj) for obj in self.objs])
