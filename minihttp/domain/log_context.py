"""Per-connection logging context using contextvars."""

import contextvars
import itertools
import logging
from typing import Any, MutableMapping, Optional

LOGGER_NAMESPACE = "minihttp"

_connection_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "connection_id", default=None
)
_connection_counter = itertools.count(1)


def next_connection_id() -> str:
    """Return a process-unique identifier for a new connection."""
    return f"conn-{next(_connection_counter)}"


def get_connection_id() -> Optional[str]:
    """Retrieve the connection ID bound to the current worker context."""
    return _connection_id_var.get()


def bind_connection_id(connection_id: str) -> contextvars.Token:
    """Bind a connection ID to the current context and return the reset token."""
    return _connection_id_var.set(connection_id)


def reset_connection_id(token: contextvars.Token) -> None:
    _connection_id_var.reset(token)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that injects connection ID and component into log records."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        connection_id = get_connection_id()
        extra["connection_id"] = connection_id if connection_id is not None else "-"

        logger_name = self.logger.name
        prefix = f"{LOGGER_NAMESPACE}."
        extra["component"] = (
            logger_name[len(prefix) :] if logger_name.startswith(prefix) else logger_name
        )
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str) -> ContextLoggerAdapter:
    """Return a context-aware adapter for ``minihttp.<name>``."""
    return ContextLoggerAdapter(logging.getLogger(f"{LOGGER_NAMESPACE}.{name}"), {})
