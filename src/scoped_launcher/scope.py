"""
Cancellation scopes.

A scope is a cancellable interval of validity. It becomes done exactly once,
either because it was cancelled explicitly or because its parent became done,
and it records the reason it ended.
"""

import logging
import threading
from typing import Callable

from scoped_launcher.errors import CanceledError, DeadlineExceededError

logger = logging.getLogger(__name__)

DoneCallback = Callable[[], None]
CancelFunc = Callable[[], None]


class Scope:
    def __init__(self, parent: "Scope | None" = None):
        self._parent = parent
        self._done = threading.Event()
        self._lock = threading.Lock()
        self._reason: CanceledError | None = None
        self._callbacks: list[DoneCallback] = []

    @property
    def parent(self) -> "Scope | None":
        return self._parent

    @property
    def reason(self) -> CanceledError | None:
        """The recorded reason once the scope is done, otherwise None"""
        with self._lock:
            return self._reason

    def done(self) -> bool:
        """Non-blocking check whether the scope has ended"""
        return self._done.is_set()

    def check(self) -> None:
        """
        Raise if the scope is done.

        The error raised is a new instance of the recorded reason's class,
        chained to it, so the recorded reason itself is never mutated.
        """
        reason = self.reason
        if reason is not None:
            raise type(reason)(str(reason)) from reason

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the scope is done. Returns False if the timeout elapsed first."""
        return self._done.wait(timeout)

    def add_done_callback(self, fn: DoneCallback) -> None:
        """Run fn once the scope is done, immediately if it already is."""
        with self._lock:
            if self._reason is None:
                self._callbacks.append(fn)
                return
        fn()

    def remove_done_callback(self, fn: DoneCallback) -> None:
        with self._lock:
            try:
                self._callbacks.remove(fn)
            except ValueError:
                pass

    def _cancel(self, reason: CanceledError) -> bool:
        """Mark the scope done. Returns False if it was already done."""
        with self._lock:
            if self._reason is not None:
                return False
            self._reason = reason
            callbacks, self._callbacks = self._callbacks, []
            self._done.set()

        logger.debug(f"Scope {id(self):#x} done: {reason}")
        for fn in callbacks:
            fn()
        return True

    def __repr__(self) -> str:
        state = f"done ({self._reason})" if self.done() else "active"
        return f"<Scope {id(self):#x} {state}>"


def background() -> Scope:
    """A root scope that is never done on its own"""
    return Scope()


def _link(parent: Scope) -> tuple[Scope, Callable[[CanceledError], bool]]:
    child = Scope(parent=parent)

    def propagate() -> None:
        child._cancel(parent.reason or CanceledError())

    def end(reason: CanceledError) -> bool:
        if not child._cancel(reason):
            return False
        parent.remove_done_callback(propagate)
        return True

    parent.add_done_callback(propagate)
    return child, end


def derive(parent: Scope) -> tuple[Scope, CancelFunc]:
    """
    Derive a child scope from parent.

    The child is done when the returned cancel function is called or when the
    parent becomes done, whichever happens first. In the latter case the child
    records the parent's reason. Calling cancel more than once is a no-op.
    """
    child, end = _link(parent)

    def cancel() -> None:
        end(CanceledError())

    return child, cancel


def derive_with_timeout(parent: Scope, timeout: float) -> tuple[Scope, CancelFunc]:
    """Derive a child scope that cancels itself after timeout seconds."""
    child, end = _link(parent)

    def expire() -> None:
        if end(DeadlineExceededError()):
            logger.debug(f"Scope {id(child):#x} deadline of {timeout}s exceeded")

    def cancel() -> None:
        end(CanceledError())

    timer = threading.Timer(timeout, expire)
    timer.daemon = True
    # Stop the timer as soon as the scope ends for any other reason
    child.add_done_callback(timer.cancel)
    timer.start()
    return child, cancel
