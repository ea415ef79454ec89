"""Integration tests for keep-alive connection handling."""

from __future__ import annotations

import socket

import pytest

from tests.utils.http import read_http_response

pytestmark = pytest.mark.integration


def build_request(path: str, host: str, port: int, connection: str | None = None) -> bytes:
    lines = [
        f"GET {path} HTTP/1.1",
        f"Host: {host}:{port}",
    ]
    if connection:
        lines.append(f"Connection: {connection}")
    lines.extend(["", ""])
    return "\r\n".join(lines).encode()


def test_multiple_requests_share_connection(server_process):
    host = server_process["host"]
    port = server_process["port"]

    with socket.create_connection((host, port), timeout=5) as client:
        client.sendall(build_request("/echo/first", host, port))
        first = read_http_response(client)
        assert first.body == b"first"

        client.sendall(build_request("/echo/second", host, port))
        second = read_http_response(client)
        assert second.body == b"second"

        client.sendall(build_request("/does-not-exist", host, port))
        assert read_http_response(client).status_code == 404


def test_connection_survives_bad_request(server_process):
    """A 400 for a malformed request line does not end the connection."""
    host = server_process["host"]
    port = server_process["port"]

    with socket.create_connection((host, port), timeout=5) as client:
        client.sendall(b"BROKEN\r\n\r\n")
        assert read_http_response(client).status_code == 400

        client.sendall(build_request("/echo/after", host, port))
        assert read_http_response(client).body == b"after"


def test_connection_close_header_does_not_close(server_process):
    """Connection: close is not interpreted; the server keeps the socket open."""
    host = server_process["host"]
    port = server_process["port"]

    with socket.create_connection((host, port), timeout=5) as client:
        client.sendall(build_request("/echo/one", host, port, connection="close"))
        assert read_http_response(client).body == b"one"

        client.sendall(build_request("/echo/two", host, port))
        assert read_http_response(client).body == b"two"


def test_idle_connection_is_closed_by_server(single_worker_server):
    """After the idle window the server closes the socket."""
    host = single_worker_server["host"]
    port = single_worker_server["port"]

    with socket.create_connection((host, port), timeout=5) as client:
        client.sendall(build_request("/", host, port))
        read_http_response(client)
        assert client.recv(1) == b""
