"""
Quiver storage: fixed-capacity buffers and the allocators that hand them out.

Scope
- Buffer: an ordered, bounded container. Its capacity is decided when it is
  allocated and never changes; appending past it is a normal, reportable
  failure (append returns False), not a reason to grow.
- Allocator: the allocation capability options, commands and parsers draw their
  storage from. It hands out buffers of a declared capacity and takes them back
  exactly once.
- Arena: a bump-style allocator. Individual frees only mark a buffer released;
  reset() releases everything at once. Suitable for one-shot CLI runs where all
  storage dies together.

Contract
- Every buffer is released exactly once. Owners (Option/Command/Parser) guard
  their own close() so repeated teardown never reaches the allocator twice.
- Touching a released buffer is a use-after-free and raises RuntimeError.

Example
    >>> with Arena() as arena:
    ...     buffer = arena.allocate(2)
    ...     buffer.append("a"), buffer.append("b"), buffer.append("c")
    (True, True, False)
"""


class Buffer:
    """
    Ordered container with a capacity fixed at allocation time.
    """

    __slots__ = ("_items", "_capacity", "_allocator", "_released")

    def __init__(self, capacity, allocator, /):
        self._items = []
        self._capacity = capacity
        self._allocator = allocator
        self._released = False

    @property
    def capacity(self):
        return self._capacity

    @property
    def allocator(self):
        return self._allocator

    @property
    def released(self):
        return self._released

    @property
    def full(self):
        return len(self) >= self._capacity

    def _check(self):
        if self._released:
            raise RuntimeError("buffer was already released")

    def append(self, item, /):
        """
        Append an item; return False (and leave the buffer untouched) when full.
        """
        self._check()
        if len(self._items) >= self._capacity:
            return False
        self._items.append(item)
        return True

    def clear(self):
        self._check()
        self._items.clear()

    def __getitem__(self, index, /):
        self._check()
        return self._items[index]

    def __len__(self):
        return 0 if self._released else len(self._items)

    def __iter__(self):
        self._check()
        return iter(tuple(self._items))

    def __bool__(self):
        return len(self) > 0

    def __repr__(self):
        if self._released:
            return "buffer(released, capacity=%d)" % self._capacity
        return "buffer(%r, capacity=%d)" % (self._items, self._capacity)

    def _release(self):
        self._items.clear()
        self._released = True


class Allocator:
    """
    Hands out fixed-capacity buffers and takes them back exactly once.

    The allocator keeps track of the buffers it has handed out so that leaks
    (live > 0 after teardown) and double frees are observable.
    """

    def __init__(self):
        self._live = []

    @property
    def live(self):
        """
        Number of buffers handed out and not yet released.
        """
        return len(self._live)

    def allocate(self, capacity, /):
        if not isinstance(capacity, int) or isinstance(capacity, bool):
            raise TypeError("allocate() argument must be an integer")
        if capacity < 0:
            raise ValueError("allocate() argument must be a non-negative integer")
        buffer = Buffer(capacity, self)
        self._live.append(buffer)
        return buffer

    def _forget(self, buffer):
        for index, candidate in enumerate(self._live):
            if candidate is buffer:
                del self._live[index]
                return True
        return False

    def free(self, buffer, /):
        if not isinstance(buffer, Buffer):
            raise TypeError("free() argument must be a buffer")
        if buffer.allocator is not self:
            raise ValueError("free() argument was not allocated by this allocator")
        if buffer.released or not self._forget(buffer):
            raise ValueError("free() argument was already released")
        buffer._release()

    def __repr__(self):
        return "%s(live=%d)" % (type(self).__name__.lower(), self.live)


class Arena(Allocator):
    """
    Bump-style allocator: everything is released together by reset().

    free() on a single buffer has no meaningful reclaim; it only marks the
    buffer released. Buffers already released by reset() may still be passed
    to free() by their owners, which is a no-op.
    """

    def free(self, buffer, /):
        if not isinstance(buffer, Buffer):
            raise TypeError("free() argument must be a buffer")
        if buffer.allocator is not self:
            raise ValueError("free() argument was not allocated by this allocator")
        if buffer.released:
            return
        self._forget(buffer)
        buffer._release()

    def reset(self):
        """
        Release every buffer handed out so far.
        """
        for buffer in self._live:
            buffer._release()
        self._live.clear()

    def __enter__(self):
        return self

    def __exit__(self, *unused):
        self.reset()


heap = Allocator()
"""
Process-wide default allocator used when no allocator is given.
"""


__all__ = (
    "Buffer",
    "Allocator",
    "Arena",
    "heap",
)
