"""Cooperative cancellation shared by every stage of an extraction."""

import threading
import time
from typing import BinaryIO

from clip_extractor.exceptions import OperationCancelledError


class CancellationToken:
    """
    Signals that an extraction should stop.

    A token is cancelled explicitly (e.g. the client disconnected) or
    implicitly once its deadline passes. Stages poll it between blocking
    steps and raise OperationCancelledError when it fires.
    """

    def __init__(self, timeout: float | None = None):
        self._event = threading.Event()
        self._deadline = None if timeout is None else time.monotonic() + timeout

    def cancel(self) -> None:
        self._event.set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def cancelled(self) -> bool:
        return self._event.is_set() or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None without one."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self, operation: str) -> None:
        if self._event.is_set():
            raise OperationCancelledError(operation, "cancelled")
        if self.expired:
            raise OperationCancelledError(operation, "deadline exceeded")


class CancellableReader:
    """Wraps a binary stream so that each read checks a cancellation token."""

    def __init__(self, stream: BinaryIO, token: CancellationToken, operation: str):
        self._stream = stream
        self._token = token
        self._operation = operation

    def read(self, size: int = -1) -> bytes:
        self._token.raise_if_cancelled(self._operation)
        return self._stream.read(size)

    def __getattr__(self, name):
        return getattr(self._stream, name)
