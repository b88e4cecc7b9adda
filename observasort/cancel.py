class SortCancelled(Exception):
    """Raised by the engine once the run's cancel token has been signalled."""

    def __init__(self):
        super().__init__("sort cancelled")


class CancelToken:
    """
    Cancellation token for one sort run.

    Cooperative: nothing is interrupted, the engine polls ``cancelled`` at
    every read, write and pause and raises ``SortCancelled`` from there.
    """
    __slots__ = ('_cancelled',)

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self):
        self._cancelled = True

    def raise_if_cancelled(self):
        if self._cancelled:
            raise SortCancelled()

    def __repr__(self):
        return f"CancelToken(cancelled={self._cancelled})"
