"""Exception types raised while parsing and handling requests."""


class ParseError(Exception):
    """Raised when raw request bytes cannot be turned into a request."""


class MalformedStatusLine(ParseError):
    """The request line has fewer than three whitespace-separated tokens."""


class InvalidContentLength(ParseError):
    """The Content-Length header is not a non-negative integer."""


class IncompleteBody(ParseError):
    """Fewer body bytes were received than Content-Length declares."""

    def __init__(self, declared: int, received: int) -> None:
        super().__init__(f"Expected {declared} body bytes, received {received}")
        self.declared = declared
        self.received = received


class HandlerError(Exception):
    """Raised by a route handler to short-circuit with an error status."""

    status_line = "500 Internal Server Error"


class MissingHeader(HandlerError):
    """A header the handler depends on was not sent."""

    status_line = "400 Bad Request"

    def __init__(self, header_name: str) -> None:
        super().__init__(f"Missing required header: {header_name}")
        self.header_name = header_name


class NotFound(HandlerError):
    """The addressed resource does not exist or could not be stored."""

    status_line = "404 Not Found"
