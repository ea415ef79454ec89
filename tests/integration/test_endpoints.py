"""Integration tests exercising the public HTTP endpoints."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import pytest
import requests

from tests.utils.http import exchange

pytestmark = pytest.mark.integration

if TYPE_CHECKING:
    from tests.conftest import ServerProcessInfo


def test_root_endpoint_returns_empty_body(base_url: str) -> None:
    """Root should respond with an empty payload."""

    response = requests.get(f"{base_url}/", headers={"X-Extra": "1"}, timeout=5)
    assert response.status_code == 200
    assert response.content == b""


def test_root_wire_format_is_bare_status_line(
    server_process: "ServerProcessInfo",
) -> None:
    """An empty 200 carries no headers at all."""

    response = exchange(
        server_process["host"], server_process["port"], b"GET / HTTP/1.1\r\n\r\n"
    )
    assert response.raw == b"HTTP/1.1 200 OK\r\n\r\n"


def test_echo_endpoint_round_trips_payload(base_url: str) -> None:
    """Echo path should round-trip the payload unmodified."""

    response = requests.get(f"{base_url}/echo/sample", timeout=5)
    assert response.status_code == 200
    assert response.text == "sample"
    assert response.headers["Content-Type"] == "text/plain"
    assert response.headers["Content-Length"] == "6"


def test_echo_counts_multibyte_characters_in_bytes(
    server_process: "ServerProcessInfo",
) -> None:
    """Content-Length reflects UTF-8 bytes for non-ASCII echo text."""

    text = "héllo/日本"
    response = exchange(
        server_process["host"],
        server_process["port"],
        f"GET /echo/{text} HTTP/1.1\r\n\r\n".encode("utf-8"),
    )
    assert response.status_code == 200
    assert response.body == text.encode("utf-8")
    assert response.headers["content-length"] == str(len(text.encode("utf-8")))


def test_echo_responses_are_byte_identical(server_process: "ServerProcessInfo") -> None:
    """Repeating the same echo request yields the same bytes."""

    host, port = server_process["host"], server_process["port"]
    raws = {exchange(host, port, b"GET /echo/abc HTTP/1.1\r\n\r\n").raw for _ in range(5)}
    assert raws == {
        b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 3\r\n\r\nabc"
    }


def test_user_agent_endpoint_reflects_header(base_url: str) -> None:
    """User-agent endpoint must mirror the request header."""

    headers = {"User-Agent": "test-client/1.0"}
    response = requests.get(f"{base_url}/user-agent", headers=headers, timeout=5)
    assert response.status_code == 200
    assert response.text == "test-client/1.0"


def test_user_agent_missing_header_is_bad_request(
    server_process: "ServerProcessInfo",
) -> None:
    response = exchange(
        server_process["host"],
        server_process["port"],
        b"GET /user-agent HTTP/1.1\r\nHost: x\r\n\r\n",
    )
    assert response.raw == b"HTTP/1.1 400 Bad Request\r\n\r\n"


def test_unknown_path_is_not_found(base_url: str) -> None:
    response = requests.get(f"{base_url}/does-not-exist", timeout=5)
    assert response.status_code == 404
    assert response.content == b""


def test_unsupported_method_is_not_found(base_url: str) -> None:
    """Methods other than GET and POST fall through to 404."""

    response = requests.delete(f"{base_url}/files/anything", timeout=5)
    assert response.status_code == 404


def test_malformed_status_line_is_bad_request(
    server_process: "ServerProcessInfo",
) -> None:
    response = exchange(server_process["host"], server_process["port"], b"GET\r\n\r\n")
    assert response.raw == b"HTTP/1.1 400 Bad Request\r\n\r\n"


def test_file_round_trip(base_url: str, server_process: "ServerProcessInfo") -> None:
    """Uploading a file then reading it back returns the same bytes.

    The upload goes out as one raw write: the server reads each request in a
    single recv, and HTTP client libraries may send the body separately.
    """

    post_response = exchange(
        server_process["host"],
        server_process["port"],
        b"POST /files/foo.txt HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello",
    )
    assert post_response.raw == b"HTTP/1.1 201 Created\r\n\r\n"

    get_response = requests.get(f"{base_url}/files/foo.txt", timeout=5)
    assert get_response.status_code == 200
    assert get_response.content == b"hello"
    assert get_response.headers["Content-Type"] == "application/octet-stream"
    assert get_response.headers["Content-Length"] == "5"

    stored_path = Path(server_process["directory"]) / "foo.txt"
    assert stored_path.read_bytes() == b"hello"


def test_existing_file_is_served(base_url: str, server_process: "ServerProcessInfo") -> None:
    payload = bytes(range(256))
    (Path(server_process["directory"]) / "blob.bin").write_bytes(payload)

    response = requests.get(f"{base_url}/files/blob.bin", timeout=5)
    assert response.status_code == 200
    assert response.content == payload


def test_missing_file_is_not_found(base_url: str) -> None:
    response = requests.get(f"{base_url}/files/missing.txt", timeout=5)
    assert response.status_code == 404
