"""
Collection types used by the solvers.

- lazydict: a defaultdict whose factory receives the missing key
- SetQueue: a FIFO queue that ignores items already pending
"""

from collections import defaultdict, deque


class lazydict(defaultdict):
    """
    A defaultdict that passes the key to the factory function.

    Example:
        >>> d = lazydict(lambda key: key * 2)
        >>> d[3]
        6
    """
    __slots__ = ()

    def __missing__(self, key):
        result = self.default_factory(key)
        self[key] = result
        return result


class SetQueue(object):
    """
    FIFO work queue with O(1) duplicate suppression.

    An item that is already waiting in the queue is not added a second time;
    once popped it may be queued again.
    """
    __slots__ = "queue", "pending"

    def __init__(self, items=()):
        self.queue = deque()
        self.pending = set()
        for item in items:
            self.push(item)

    def push(self, item):
        """Queue item unless it is already pending.  Returns True if queued."""
        if item in self.pending:
            return False
        self.pending.add(item)
        self.queue.append(item)
        return True

    def pop(self):
        item = self.queue.popleft()
        self.pending.discard(item)
        return item

    def __contains__(self, item):
        return item in self.pending

    def __len__(self):
        return len(self.queue)

    def __bool__(self):
        return bool(self.queue)
