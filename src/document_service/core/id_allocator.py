"""Monotonic document identifier allocation."""


class IdAllocator:
    """Hands out integer ids that never repeat.

    The counter is restored from the snapshot rather than derived from the
    stored keys, so ids freed by deletion are never handed out again.
    """

    def __init__(self, start: int = 1):
        if start < 1:
            raise ValueError(f"Id counter must start at 1 or above, got {start}")
        self._next = start

    def next(self) -> int:
        """Return the current counter value and advance it."""
        value = self._next
        self._next += 1
        return value

    def peek(self) -> int:
        """Return the value the next call to ``next()`` will hand out."""
        return self._next

    def __repr__(self) -> str:
        return f"IdAllocator(next={self._next})"
