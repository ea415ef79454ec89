"""Handlers reading and writing files under the configured files root."""

from pathlib import Path

from minihttp.bootstrap.config import ServerConfig
from minihttp.domain.errors import NotFound
from minihttp.domain.http_types import HttpRequest, HttpResponse
from minihttp.domain.log_context import get_logger
from minihttp.domain.response_builders import created_response, octet_response
from minihttp.domain.sandbox import ForbiddenPath, resolve_files_path

FILE_LOGGER = get_logger("handlers.file")


def _sandboxed_path(config: ServerConfig, name: str, method: str) -> Path:
    try:
        return resolve_files_path(config.files_root, name)
    except ForbiddenPath as exc:
        FILE_LOGGER.warning(
            "Forbidden path access blocked",
            extra={"event": "forbidden_path", "path": name, "method": method},
        )
        raise NotFound(name) from exc


def handle_file_read(
    request: HttpRequest, captured: str, config: ServerConfig
) -> HttpResponse:
    """Serve the named file as application/octet-stream."""
    resolved_path = _sandboxed_path(config, captured, request.method)
    try:
        payload = resolved_path.read_bytes()
    except OSError as exc:
        FILE_LOGGER.info(
            "File not found",
            extra={
                "event": "file_not_found",
                "path": resolved_path.as_posix(),
                "error_type": type(exc).__name__,
            },
        )
        raise NotFound(captured) from exc

    FILE_LOGGER.info(
        "File read operation complete",
        extra={
            "event": "file_read_complete",
            "path": resolved_path.as_posix(),
            "bytes_out": len(payload),
        },
    )
    return octet_response(payload)


def handle_file_write(
    request: HttpRequest, captured: str, config: ServerConfig
) -> HttpResponse:
    """Store the request body under the named file, replacing any existing one.

    Writes are not serialized: concurrent writers to one name race and the
    last one to finish wins. A failed write answers 404, not a 5xx.
    """
    resolved_path = _sandboxed_path(config, captured, request.method)
    try:
        resolved_path.parent.mkdir(parents=True, exist_ok=True)
        resolved_path.write_bytes(request.body)
    except OSError as exc:
        FILE_LOGGER.warning(
            "File write failed",
            extra={
                "event": "file_write_failed",
                "path": resolved_path.as_posix(),
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )
        raise NotFound(captured) from exc

    FILE_LOGGER.info(
        "File write complete",
        extra={
            "event": "file_write_complete",
            "path": resolved_path.as_posix(),
            "bytes_in": len(request.body),
        },
    )
    return created_response()
