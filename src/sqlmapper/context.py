"""
Cancellation tokens threaded through every statement call.

The mapper never imposes a timeout of its own. A caller that wants one builds
a Context with a deadline, or cancels it from another thread, and the next
prepare/execute/fetch step raises.

Examples
    ctx = Context.with_timeout(5)
    row = fm.select_by_key(db=engine, ctx=ctx)
"""
import threading
import time
from typing import Self

from sqlmapper.exceptions import ContextCancelledError, ContextError
from sqlmapper.exceptions import DeadlineExceededError

__all__ = ['Context']


class Context:
    """Cancellation signal with an optional monotonic deadline.
    """

    def __init__(self, deadline: float | None = None,
                 parent: 'Context | None' = None) -> None:
        self._cancelled = threading.Event()
        self.parent = parent
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline

    @classmethod
    def background(cls) -> Self:
        """Context that is never cancelled and has no deadline.
        """
        return cls()

    @classmethod
    def with_deadline(cls, deadline: float, parent: 'Context | None' = None) -> Self:
        """Context expiring at ``deadline`` (a `time.monotonic()` value).
        """
        return cls(deadline=deadline, parent=parent)

    @classmethod
    def with_timeout(cls, seconds: float, parent: 'Context | None' = None) -> Self:
        return cls.with_deadline(time.monotonic() + seconds, parent=parent)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        if self._cancelled.is_set():
            return True
        return self.parent is not None and self.parent.cancelled

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one.
        """
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def err(self) -> ContextError | None:
        """The error this context would raise now, if any.
        """
        if self.cancelled:
            return ContextCancelledError('context canceled')
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return DeadlineExceededError('context deadline exceeded')
        return None

    def check(self) -> None:
        """Raise if the context is cancelled or past its deadline.
        """
        err = self.err()
        if err is not None:
            raise err

    def __repr__(self) -> str:
        return f'Context(deadline={self.deadline}, cancelled={self.cancelled})'
