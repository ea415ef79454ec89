"""Listening socket creation."""

import socket

from minihttp.bootstrap.config import ServerConfig

ACCEPT_POLL_SECONDS = 0.5


def create_server_socket(config: ServerConfig) -> socket.socket:
    """Bind the listening socket; accept() wakes periodically to poll for shutdown."""
    server_socket = socket.create_server((config.host, config.port))
    server_socket.settimeout(ACCEPT_POLL_SECONDS)
    return server_socket
