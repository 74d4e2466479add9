"""
Cooperative cancellation for split readers.

Split readers check the token before requesting each record; once cancellation is
requested they stop issuing reads, release the current file handle and raise
SplitCancelled. Records already handed to the sink are not retracted.
"""

from __future__ import annotations

import threading

__all__ = ["CancellationToken"]


class CancellationToken:
    """
    Thread-safe cancellation flag shared between a scheduler and its workers.

    Args:
        parent (CancellationToken | None): Token whose cancellation also cancels this
            one. A job links its internal token to the caller's token this way, so it
            can stop its own workers without cancelling the caller's token.

    Examples:
        >>> token = CancellationToken()
        >>> token.is_cancelled()
        False
        >>> child = CancellationToken(parent=token)
        >>> token.cancel()
        >>> token.is_cancelled(), child.is_cancelled()
        (True, True)
    """

    def __init__(self, parent: CancellationToken | None = None) -> None:
        self._event = threading.Event()
        self._parent = parent

    def cancel(self) -> None:
        """Signal that cancellation has been requested."""
        self._event.set()

    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.is_cancelled()
