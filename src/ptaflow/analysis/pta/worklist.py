"""
Worklist of the pointer analysis solver.

Entries pair a pointer with objects to propagate to it.  A pointer is
pending at most once: adding to a pending pointer merges the objects into
its pending entry.  Entries are taken in FIFO order of first insertion.
"""

from collections import deque

from .pointsto import PointsToSet


class WorkList(object):
    __slots__ = "queue", "pending"

    def __init__(self):
        self.queue = deque()
        self.pending = {}

    def addEntry(self, pointer, pointsTo):
        entry = self.pending.get(pointer)
        if entry is None:
            self.pending[pointer] = pointsTo.copy()
            self.queue.append(pointer)
        else:
            entry.addAll(pointsTo)

    def pollEntry(self):
        pointer = self.queue.popleft()
        return pointer, self.pending.pop(pointer)

    def isEmpty(self):
        return not self.queue

    def __len__(self):
        return len(self.queue)
