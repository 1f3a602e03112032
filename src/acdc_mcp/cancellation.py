"""Cooperative cancellation shared by streaming and indexing."""

from __future__ import annotations

import threading


class OperationCancelledError(Exception):
    """Raised when a caller signals cancellation mid-operation."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} cancelled")
        self.operation = operation


def raise_if_cancelled(cancel: threading.Event | None, operation: str) -> None:
    """Raise OperationCancelledError when the cancel signal is set."""
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError(operation)
