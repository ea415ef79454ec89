"""Handlers for the root, echo, user-agent and fallback routes."""

import logging

from minihttp.bootstrap.config import ServerConfig
from minihttp.domain.errors import MissingHeader
from minihttp.domain.http_types import HttpRequest, HttpResponse
from minihttp.domain.log_context import get_logger
from minihttp.domain.response_builders import (
    empty_response,
    not_found_response,
    text_response,
)

SYSTEM_LOGGER = get_logger("handlers.system")

USER_AGENT_HEADER = "User-Agent"


def handle_root(
    _request: HttpRequest, _captured: str, _config: ServerConfig
) -> HttpResponse:
    """Answer ``GET /`` with an empty 200 whatever the request carried."""
    return empty_response()


def handle_echo(
    _request: HttpRequest, captured: str, _config: ServerConfig
) -> HttpResponse:
    """Return the captured path remainder as the body, unmodified."""
    if SYSTEM_LOGGER.logger.isEnabledFor(logging.DEBUG):
        SYSTEM_LOGGER.debug(
            "Echo request processed",
            extra={"event": "echo_request", "bytes_out": len(captured.encode("utf-8"))},
        )
    return text_response(captured)


def handle_user_agent(
    request: HttpRequest, _captured: str, _config: ServerConfig
) -> HttpResponse:
    """Mirror the User-Agent header back to the client."""
    agent = request.header(USER_AGENT_HEADER)
    if agent is None:
        raise MissingHeader(USER_AGENT_HEADER)
    return text_response(agent)


def handle_not_found(
    _request: HttpRequest, _captured: str, _config: ServerConfig
) -> HttpResponse:
    return not_found_response()
