"""Turn the bytes of a single socket read into an HttpRequest.

The connection loop hands over exactly what one ``recv`` returned. A request
whose headers or declared body do not fit in that read is not reassembled
from further reads; a short body is reported as ``IncompleteBody``.
"""

from typing import Optional

from minihttp.bootstrap.config import HEADER_DELIMITER
from minihttp.domain.errors import IncompleteBody, InvalidContentLength, MalformedStatusLine
from minihttp.domain.http_types import HttpRequest
from minihttp.domain.log_context import get_logger

PARSER_LOGGER = get_logger("pipeline.parser")

CRLF = "\r\n"


def parse_status_line(line: str) -> tuple[str, str, str]:
    """Split the request line into method, path and version."""
    tokens = line.split()
    if len(tokens) < 3:
        raise MalformedStatusLine(line)
    method, path, version = tokens[:3]
    return method, path, version


def parse_headers(lines: list[str]) -> dict[str, str]:
    """Build the header mapping; names keep their case, later duplicates win."""
    parsed: dict[str, str] = {}
    for line in lines:
        if not line:
            continue
        if ":" not in line:
            PARSER_LOGGER.warning(
                "Skipping header line without colon",
                extra={"event": "header_line_skipped", "line": line},
            )
            continue
        name, value = line.split(":", 1)
        parsed[name.strip()] = value.strip()
    return parsed


def _declared_length(headers: dict[str, str]) -> Optional[int]:
    raw_value = None
    for name, value in headers.items():
        if name.lower() == "content-length":
            raw_value = value
    if raw_value is None:
        return None
    try:
        content_length = int(raw_value)
    except ValueError as exc:
        raise InvalidContentLength(raw_value) from exc
    if content_length < 0:
        raise InvalidContentLength(raw_value)
    return content_length


def parse_request(data: bytes) -> HttpRequest:
    """Parse raw request bytes, raising a ParseError subclass on bad input."""
    header_block, delimiter, remainder = data.partition(HEADER_DELIMITER)
    if not delimiter:
        remainder = b""

    header_lines = header_block.decode("utf-8", errors="replace").split(CRLF)
    method, path, version = parse_status_line(header_lines[0])
    headers = parse_headers(header_lines[1:])

    content_length = _declared_length(headers)
    if content_length is None:
        body = b""
    elif len(remainder) < content_length:
        raise IncompleteBody(content_length, len(remainder))
    else:
        body = remainder[:content_length]

    return HttpRequest(method, path, version, headers, body)
