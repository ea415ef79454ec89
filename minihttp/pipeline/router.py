"""Request routing logic.

``route`` only looks at the method and path; ``build_response`` runs the
matched handler and turns handler errors into their status responses.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from minihttp.bootstrap.config import (
    ECHO_ENDPOINT_PREFIX,
    FILES_ENDPOINT_PREFIX,
    ServerConfig,
)
from minihttp.domain.errors import HandlerError
from minihttp.domain.http_types import HttpRequest, HttpResponse
from minihttp.domain.log_context import get_logger
from minihttp.domain.response_builders import error_response
from minihttp.handlers.file_handler import handle_file_read, handle_file_write
from minihttp.handlers.system_handlers import (
    handle_echo,
    handle_not_found,
    handle_root,
    handle_user_agent,
)

ROUTER_LOGGER = get_logger("pipeline.router")

Handler = Callable[[HttpRequest, str, ServerConfig], HttpResponse]


@dataclass(frozen=True)
class Route:
    """A method plus an exact path, or a prefix whose remainder is captured."""

    name: str
    method: str
    path: str
    handler: Handler
    is_prefix: bool = False

    def match(self, method: str, path: str) -> Optional[str]:
        """Return the captured segment ("" for exact routes) or None."""
        if method != self.method:
            return None
        if self.is_prefix:
            if path.startswith(self.path):
                return path[len(self.path) :]
            return None
        return "" if path == self.path else None


@dataclass(frozen=True)
class RouteMatch:
    name: str
    handler: Handler
    captured: str = ""


# Evaluated top to bottom; the first match wins.
ROUTES = (
    Route("root", "GET", "/", handle_root),
    Route("echo", "GET", ECHO_ENDPOINT_PREFIX, handle_echo, is_prefix=True),
    Route("user_agent", "GET", "/user-agent", handle_user_agent),
    Route("file_read", "GET", FILES_ENDPOINT_PREFIX, handle_file_read, is_prefix=True),
    Route("file_write", "POST", FILES_ENDPOINT_PREFIX, handle_file_write, is_prefix=True),
)

NOT_FOUND_MATCH = RouteMatch("not_found", handle_not_found)


def route(method: str, path: str) -> RouteMatch:
    """Select the handler for a method and path."""
    for candidate in ROUTES:
        captured = candidate.match(method, path)
        if captured is not None:
            return RouteMatch(candidate.name, candidate.handler, captured)
    return NOT_FOUND_MATCH


def build_response(request: HttpRequest, config: ServerConfig) -> HttpResponse:
    """Route the request, run its handler and return the response."""
    matched = route(request.method, request.path)
    if matched is NOT_FOUND_MATCH:
        ROUTER_LOGGER.info(
            "No matching route found",
            extra={
                "event": "route_not_found",
                "route": request.path,
                "method": request.method,
            },
        )
    elif ROUTER_LOGGER.logger.isEnabledFor(logging.DEBUG):
        ROUTER_LOGGER.debug(
            "Route matched",
            extra={"event": "route_matched", "route": request.path, "handler": matched.name},
        )

    try:
        return matched.handler(request, matched.captured, config)
    except HandlerError as error:
        ROUTER_LOGGER.info(
            "Handler rejected request",
            extra={
                "event": "handler_error",
                "route": request.path,
                "handler": matched.name,
                "error_type": type(error).__name__,
                "status": error.status_line,
            },
        )
        return error_response(error)
