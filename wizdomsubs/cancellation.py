"""Cooperative cancellation for blocking network and archive operations.

A CancellationToken is shared between the caller and an in-flight operation.
Operations poll it between chunks and register callbacks (typically
``response.close``) so that a cancel aborts a blocked read promptly.
"""

import logging
import threading
from typing import Callable

from wizdomsubs.error_handler import OperationCancelledError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, one-shot cancellation signal."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation and run registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.debug("Cancellation callback failed: %s", e)

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run callback on cancel (immediately if already cancelled).

        Returns a function that unregisters the callback.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelledError()


class _NeverCancelled(CancellationToken):
    """Token used when the caller supplies none."""

    def cancel(self) -> None:
        raise RuntimeError("The default token cannot be cancelled")

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        return lambda: None


NEVER = _NeverCancelled()


def ensure_token(token: CancellationToken | None) -> CancellationToken:
    return token if token is not None else NEVER
