"""Cooperative cancellation for usage queries."""
import threading

from .errors import QueryCancelledError


class CancellationToken:
    """Cancellation flag shared between the host and one running query.

    The host may call cancel() from another thread (a signal handler, a UI
    callback); the query polls check() between units of work.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        """Request cancellation of the running query."""
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def check(self):
        """Raise QueryCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise QueryCancelledError("Query cancelled by host")
