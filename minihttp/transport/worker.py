"""Connection loop: read, parse, route and write until the client goes away."""

import socket
import time
from typing import Optional

from minihttp.bootstrap.config import ServerConfig
from minihttp.domain.errors import IncompleteBody, ParseError
from minihttp.domain.log_context import (
    bind_connection_id,
    get_logger,
    next_connection_id,
    reset_connection_id,
)
from minihttp.domain.response_builders import bad_request_response
from minihttp.lifecycle.state import ServerLifecycle
from minihttp.pipeline.io import send_response
from minihttp.pipeline.parser import parse_request
from minihttp.pipeline.router import build_response

WORKER_LOGGER = get_logger("transport.worker")


def _recv_with_deadline(
    client_socket: socket.socket,
    buffer: memoryview,
    deadline: float,
    read_timeout: float,
    lifecycle: Optional[ServerLifecycle],
) -> Optional[int]:
    """Receive into ``buffer`` before ``deadline``; None on idle expiry or stop.

    Each ``recv_into`` blocks for at most ``read_timeout`` seconds so the
    lifecycle and the idle deadline are rechecked between attempts.
    """
    while True:
        if lifecycle is not None and lifecycle.should_stop():
            return None
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return None
        client_socket.settimeout(min(remaining, read_timeout))
        try:
            return client_socket.recv_into(buffer)
        except socket.timeout:
            continue


def _read_request_bytes(
    client_socket: socket.socket,
    buffer: memoryview,
    config: ServerConfig,
    lifecycle: Optional[ServerLifecycle],
    client_addr_str: str,
) -> Optional[bytes]:
    """Perform the single read that makes up one request.

    Returns None when the connection should close: the idle window expired,
    the server is stopping, or the peer closed its side.
    """
    deadline = time.monotonic() + config.idle_timeout
    received = _recv_with_deadline(
        client_socket, buffer, deadline, config.read_timeout, lifecycle
    )
    if received is None:
        WORKER_LOGGER.debug(
            "Connection idle window closed",
            extra={"event": "connection_idle_timeout", "client": client_addr_str},
        )
        return None
    if received == 0:
        WORKER_LOGGER.debug(
            "Client disconnected",
            extra={"event": "client_disconnected", "client": client_addr_str},
        )
        return None
    return bytes(buffer[:received])


def _serve_request(
    client_socket: socket.socket,
    data: bytes,
    config: ServerConfig,
    client_addr_str: str,
) -> bool:
    """Answer one request; return False when the connection must close."""
    # Responses are written without a time limit.
    client_socket.settimeout(None)
    try:
        request = parse_request(data)
    except IncompleteBody as error:
        WORKER_LOGGER.warning(
            "Request body shorter than Content-Length",
            extra={
                "event": "incomplete_body",
                "client": client_addr_str,
                "declared": error.declared,
                "received": error.received,
            },
        )
        return False
    except ParseError as error:
        WORKER_LOGGER.warning(
            "Malformed request received",
            extra={
                "event": "malformed_request",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
        send_response(client_socket, bad_request_response())
        return True

    WORKER_LOGGER.debug(
        "Request line parsed",
        extra={
            "event": "request_parsed",
            "method": request.method,
            "route": request.path,
            "bytes_in": len(data),
        },
    )
    response = build_response(request, config)
    send_response(client_socket, response)
    WORKER_LOGGER.info(
        "Request complete",
        extra={
            "event": "request_complete",
            "client": client_addr_str,
            "method": request.method,
            "route": request.path,
            "status": response.status_line,
        },
    )
    return True


def _close_socket(client_socket: socket.socket, client_addr_str: str) -> None:
    try:
        client_socket.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass
    client_socket.close()
    WORKER_LOGGER.debug(
        "Socket closed",
        extra={"event": "socket_closed", "client": client_addr_str},
    )


def handle_connection(
    client_socket: socket.socket,
    client_address: tuple[str, int],
    config: ServerConfig,
    lifecycle: Optional[ServerLifecycle] = None,
) -> None:
    """Serve sequential requests on one connection until it closes.

    Every connection is treated as keep-alive. The loop ends when the peer
    closes, the idle window expires, a socket error occurs, or
    the server starts stopping. Errors never propagate to the worker pool.
    """
    client_addr_str = f"{client_address[0]}:{client_address[1]}"
    token = bind_connection_id(next_connection_id())
    buffer = memoryview(bytearray(config.read_buffer_size))

    try:
        while True:
            data = _read_request_bytes(
                client_socket, buffer, config, lifecycle, client_addr_str
            )
            if data is None:
                break
            if not _serve_request(client_socket, data, config, client_addr_str):
                break
    except OSError as error:
        WORKER_LOGGER.info(
            "Connection ended by socket error",
            extra={
                "event": "connection_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
            },
        )
    except Exception as error:  # pylint: disable=broad-except
        WORKER_LOGGER.error(
            "Unexpected error in worker",
            extra={
                "event": "worker_error",
                "client": client_addr_str,
                "error_type": type(error).__name__,
                "error": str(error),
            },
            exc_info=True,
        )
    finally:
        _close_socket(client_socket, client_addr_str)
        reset_connection_id(token)
