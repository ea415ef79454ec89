"""Fixed-size worker pool and the connection accept loop."""

import concurrent.futures
import socket
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from minihttp.bootstrap.config import ServerConfig
from minihttp.domain.log_context import get_logger
from minihttp.lifecycle.state import ServerLifecycle
from minihttp.transport.worker import handle_connection

DISPATCH_LOGGER = get_logger("transport.dispatcher")


class Dispatcher:
    """Hands accepted connections to a bounded pool of worker threads.

    Each connection is owned by one worker until it closes. When every
    worker is busy, new connections wait in the pool's queue instead of
    being refused.
    """

    def __init__(
        self, config: ServerConfig, lifecycle: Optional[ServerLifecycle] = None
    ) -> None:
        if config.worker_count < 1:
            raise ValueError("worker_count must be at least 1")
        self._config = config
        self._lifecycle = lifecycle if lifecycle is not None else ServerLifecycle()
        self._executor = ThreadPoolExecutor(
            max_workers=config.worker_count, thread_name_prefix="minihttp-worker"
        )
        self._lock = threading.Lock()
        self._futures: set[Future] = set()
        self._active = 0

    @property
    def lifecycle(self) -> ServerLifecycle:
        return self._lifecycle

    def active_count(self) -> int:
        """Number of connections a worker is currently serving."""
        with self._lock:
            return self._active

    def pending_count(self) -> int:
        """Number of accepted connections still waiting for a worker."""
        with self._lock:
            return max(0, len(self._futures) - self._active)

    def submit(self, client_socket: socket.socket, client_address: tuple[str, int]) -> Future:
        """Queue a connection to be served to completion by a worker."""
        future = self._executor.submit(self._run_connection, client_socket, client_address)
        with self._lock:
            self._futures.add(future)
        future.add_done_callback(
            lambda done: self._forget(done, client_socket, client_address)
        )
        return future

    def _run_connection(
        self, client_socket: socket.socket, client_address: tuple[str, int]
    ) -> None:
        with self._lock:
            self._active += 1
        try:
            handle_connection(client_socket, client_address, self._config, self._lifecycle)
        finally:
            with self._lock:
                self._active -= 1

    def _forget(
        self,
        future: Future,
        client_socket: socket.socket,
        client_address: tuple[str, int],
    ) -> None:
        with self._lock:
            self._futures.discard(future)
        if future.cancelled():
            DISPATCH_LOGGER.info(
                "Queued connection dropped during shutdown",
                extra={
                    "event": "connection_cancelled",
                    "client": f"{client_address[0]}:{client_address[1]}",
                },
            )
            client_socket.close()

    def run(self, server_socket: socket.socket) -> None:
        """Accept connections until the lifecycle says stop.

        The listening socket should carry a timeout so the loop can notice a
        stop request; accept failures are logged and never end the loop.
        """
        DISPATCH_LOGGER.info(
            "Server listening for connections",
            extra={
                "event": "server_listening",
                "host": self._config.host,
                "port": self._config.port,
                "workers": self._config.worker_count,
            },
        )
        while not self._lifecycle.should_stop():
            try:
                client_socket, client_address = server_socket.accept()
            except socket.timeout:
                continue
            except OSError as error:
                if self._lifecycle.should_stop():
                    break
                DISPATCH_LOGGER.error(
                    "Socket accept failed",
                    extra={"event": "accept_error", "error_type": type(error).__name__},
                )
                continue

            DISPATCH_LOGGER.debug(
                "Client connection accepted",
                extra={
                    "event": "client_accepted",
                    "client": f"{client_address[0]}:{client_address[1]}",
                    "active": self.active_count(),
                    "pending": self.pending_count(),
                },
            )
            self.submit(client_socket, client_address)

    def shutdown(self) -> bool:
        """Drop queued connections and wait for in-flight ones to finish.

        Returns True when every worker finished within the grace period.
        """
        self._lifecycle.begin_stopping()
        grace_seconds = self._config.shutdown_grace_seconds
        DISPATCH_LOGGER.info(
            "Waiting for active connections to complete",
            extra={
                "event": "shutdown_waiting",
                "grace_seconds": grace_seconds,
                "active": self.active_count(),
                "pending": self.pending_count(),
            },
        )
        self._executor.shutdown(wait=False, cancel_futures=True)
        with self._lock:
            running = list(self._futures)
        _, not_done = concurrent.futures.wait(running, timeout=grace_seconds)
        DISPATCH_LOGGER.info(
            "Server shutdown complete",
            extra={"event": "server_stopped", "active": len(not_done)},
        )
        return not not_done
