"""Cooperative cancellation."""

import threading

from ..exceptions import AnalysisCancelled


class CancellationToken:
    """Run-scoped cancellation flag polled at fixed points of a run.

    ``cancel`` is safe to call from another thread or a signal handler.
    Nothing is interrupted pre-emptively; the run unwinds the next time it
    calls ``raise_if_cancelled``.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, where: str = "") -> None:
        if self._event.is_set():
            raise AnalysisCancelled(where)
