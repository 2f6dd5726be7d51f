"""
Canonical object management for the analysis entities.

Every entity the analyses create on demand (contexts, context-sensitive
variables, objects and methods, field pointers, call sites) must have a
single identity for the lifetime of one analysis run.  This module provides
the two building blocks used for that:

- CanonicalObject: objects compared by a tuple of canonical values
- CanonicalCache: a get-or-create factory returning one instance per value

Unlike a weak cache, entries in a CanonicalCache are kept alive until the
cache itself is discarded, so a handle obtained early in a run is still the
one handed out at the end of it.
"""


class CanonicalObject(object):
    """
    Base class for objects that are compared by their canonical values.

    Two canonical objects are equal if they have the same type and the same
    canonical values (the arguments passed to setCanonical).

    Attributes:
        canonical: Tuple of canonical values that define this object's identity
        hash: Precomputed hash value
    """
    __slots__ = "canonical", "hash"

    def __init__(self, *args):
        self.setCanonical(*args)

    def setCanonical(self, *args):
        """
        Set the canonical values for this object.

        Args:
            *args: Values that define this object's canonical identity
        """
        self.canonical = args
        self.hash = id(type(self)) ^ hash(args)

    def __hash__(self):
        return self.hash

    def __eq__(self, other):
        return type(self) == type(other) and self.canonical == other.canonical

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        canonicalStr = ", ".join([repr(obj) for obj in self.canonical])
        return "%s(%s)" % (type(self).__name__, canonicalStr)


class CanonicalCache(object):
    """
    Factory that ensures only one canonical instance per value.

    Example:
        >>> cache = CanonicalCache(Point)
        >>> cache(1, 2) is cache(1, 2)
        True

    Attributes:
        create: Factory that builds a new object from the arguments
        cache: Mapping from canonical object to its first instance
    """

    def __init__(self, create):
        self.create = create
        self.cache = {}

    def __call__(self, *args):
        obj = self.create(*args)
        return self.cache.setdefault(obj, obj)

    def __len__(self):
        return len(self.cache)

    def __iter__(self):
        return iter(self.cache)


class Interner(object):
    """
    Get-or-create table keyed by an arbitrary hashable key.

    Each new entry receives the next integer index, which doubles as a
    compact handle for the entry.  Entries are never removed.

    Attributes:
        create: Callable (index, *key) -> new entry
        table: Mapping from key to entry
    """
    __slots__ = "create", "table"

    def __init__(self, create):
        self.create = create
        self.table = {}

    def get(self, *key):
        entry = self.table.get(key)
        if entry is None:
            entry = self.create(len(self.table), *key)
            self.table[key] = entry
        return entry

    def lookup(self, *key):
        """The entry for key, or None if it was never created."""
        return self.table.get(key)

    def values(self):
        return self.table.values()

    def __len__(self):
        return len(self.table)

    def __contains__(self, key):
        return key in self.table
