"""HTTP response serialization and socket output."""

import socket

from minihttp.domain.http_types import HttpResponse
from minihttp.domain.log_context import get_logger

IO_LOGGER = get_logger("pipeline.io")

HTTP_VERSION = "HTTP/1.1"


def _content_headers(response: HttpResponse) -> dict[str, str]:
    """Return the headers with Content-Length matching a non-empty body."""
    if not response.body:
        return dict(response.headers)
    expected = str(len(response.body))
    headers: dict[str, str] = {}
    found = False
    for name, value in response.headers.items():
        if name.lower() == "content-length":
            if found:
                continue
            value = expected
            found = True
        headers[name] = value
    if not found:
        headers["Content-Length"] = expected
    return headers


def serialize_response(response: HttpResponse) -> bytes:
    """Serialize a response to its exact wire bytes."""
    lines = [f"{HTTP_VERSION} {response.status_line}"]
    lines.extend(f"{name}: {value}" for name, value in _content_headers(response).items())
    head = "\r\n".join(lines) + "\r\n\r\n"
    return head.encode("utf-8") + response.body


def send_response(client_socket: socket.socket, response: HttpResponse) -> int:
    """Write the whole serialized response and return the byte count."""
    payload = serialize_response(response)
    client_socket.sendall(payload)
    IO_LOGGER.debug(
        "Sent response",
        extra={
            "event": "response_sent",
            "status": response.status_line,
            "bytes_out": len(payload),
        },
    )
    return len(payload)
