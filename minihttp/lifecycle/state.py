"""Server lifecycle state management."""

import threading

from minihttp.domain.log_context import get_logger

LIFECYCLE_LOGGER = get_logger("lifecycle")


class ServerLifecycle:
    """Stop flag shared by the accept loop and the connection workers."""

    def __init__(self) -> None:
        self._stop_event = threading.Event()

    def should_stop(self) -> bool:
        """Check if the server should stop accepting and serving requests."""
        return self._stop_event.is_set()

    def begin_stopping(self) -> None:
        """Signal the accept loop and idle workers to wind down."""
        if not self._stop_event.is_set():
            LIFECYCLE_LOGGER.info("Beginning shutdown", extra={"event": "shutdown_started"})
        self._stop_event.set()
