"""HTTP response builders shared by handlers and the connection loop."""

from minihttp.domain.errors import HandlerError
from minihttp.domain.http_types import HttpResponse

STATUS_OK = "200 OK"
STATUS_CREATED = "201 Created"
STATUS_BAD_REQUEST = "400 Bad Request"
STATUS_NOT_FOUND = "404 Not Found"

TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


def empty_response(status_line: str = STATUS_OK) -> HttpResponse:
    """Return a header-less response with no body."""
    return HttpResponse(status_line, {}, b"")


def content_response(
    payload: bytes, content_type: str, status_line: str = STATUS_OK
) -> HttpResponse:
    """Return a response carrying ``payload`` with its content headers."""
    headers = {
        "Content-Type": content_type,
        "Content-Length": str(len(payload)),
    }
    return HttpResponse(status_line, headers, payload)


def text_response(message: str) -> HttpResponse:
    """Return a 200 text/plain response; length is counted in UTF-8 bytes."""
    return content_response(message.encode("utf-8"), TEXT_PLAIN)


def octet_response(payload: bytes) -> HttpResponse:
    return content_response(payload, OCTET_STREAM)


def created_response() -> HttpResponse:
    return empty_response(STATUS_CREATED)


def bad_request_response() -> HttpResponse:
    return empty_response(STATUS_BAD_REQUEST)


def not_found_response() -> HttpResponse:
    return empty_response(STATUS_NOT_FOUND)


def error_response(error: HandlerError) -> HttpResponse:
    """Build the empty-bodied response matching a handler error."""
    return empty_response(error.status_line)
