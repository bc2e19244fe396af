"""Cancellation token threaded through a single dispatch.

A token is done once it is cancelled explicitly, once its deadline passes, or
once its parent is done. Handlers poll it; the script runner waits on it.
"""

import threading
import time
from typing import Optional

from .errors import Cancelled, TimeoutExceeded


class CancelToken:
    """Thread-safe cancellation signal with an optional monotonic deadline."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        parent: Optional["CancelToken"] = None,
    ) -> None:
        self._event = threading.Event()
        self._parent = parent
        self._deadline: Optional[float] = None
        if timeout is not None:
            self._deadline = time.monotonic() + max(timeout, 0.0)

    @classmethod
    def with_timeout(
        cls, timeout: float, parent: Optional["CancelToken"] = None
    ) -> "CancelToken":
        """Create a token that expires ``timeout`` seconds from now."""
        return cls(timeout=timeout, parent=parent)

    def child(self, timeout: Optional[float] = None) -> "CancelToken":
        """Derive a token that is done when this one is, or sooner."""
        return CancelToken(timeout=timeout, parent=self)

    @property
    def deadline(self) -> Optional[float]:
        """Tightest monotonic deadline of this token and its ancestors."""
        deadlines = []
        token: Optional[CancelToken] = self
        while token is not None:
            if token._deadline is not None:
                deadlines.append(token._deadline)
            token = token._parent
        return min(deadlines) if deadlines else None

    def remaining(self) -> Optional[float]:
        """Seconds until the deadline (never negative), or None without one."""
        deadline = self.deadline
        if deadline is None:
            return None
        return max(deadline - time.monotonic(), 0.0)

    def cancel(self) -> None:
        """Signal cancellation to this token and every token derived from it."""
        self._event.set()

    def cancelled(self) -> bool:
        """True if this token or an ancestor was cancelled explicitly."""
        token: Optional[CancelToken] = self
        while token is not None:
            if token._event.is_set():
                return True
            token = token._parent
        return False

    def expired(self) -> bool:
        """True if the deadline has passed."""
        deadline = self.deadline
        return deadline is not None and time.monotonic() >= deadline

    def done(self) -> bool:
        return self.cancelled() or self.expired()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the token is done or ``timeout`` elapses.

        Returns
        -------
        bool
            True if the token is done.
        """
        limit = None if timeout is None else time.monotonic() + timeout
        while not self.done():
            step = self.remaining()
            if limit is not None:
                left = limit - time.monotonic()
                if left <= 0:
                    break
                step = left if step is None else min(step, left)
            # Ancestors have their own events, so wake periodically to check them
            step = 0.05 if step is None else min(step, 0.05)
            self._event.wait(step)
        return self.done()

    def raise_if_done(self) -> None:
        """Raise Cancelled or TimeoutExceeded if the token is done."""
        if self.cancelled():
            raise Cancelled()
        if self.expired():
            raise TimeoutExceeded()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled() else "expired" if self.expired() else "active"
        return f"CancelToken({state}, remaining={self.remaining()})"
