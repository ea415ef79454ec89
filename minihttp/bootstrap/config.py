"""Server configuration and CLI argument parsing."""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value is not None else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value is not None else default


DEFAULT_HOST = os.getenv("MINIHTTP_HOST", "127.0.0.1")
DEFAULT_PORT = _env_int("MINIHTTP_PORT", 4221)
DEFAULT_WORKERS = _env_int("MINIHTTP_WORKERS", 8)
# Stall budget for a single recv once the client has started sending.
DEFAULT_READ_TIMEOUT = _env_float("MINIHTTP_READ_TIMEOUT", 1.0)
# Keep-alive window between requests on one connection.
DEFAULT_IDLE_TIMEOUT = _env_float("MINIHTTP_IDLE_TIMEOUT", 60.0)
# Hard cap on request size: a request must arrive in one read of this many bytes.
DEFAULT_READ_BUFFER_SIZE = _env_int("MINIHTTP_READ_BUFFER_SIZE", 4096)
DEFAULT_SHUTDOWN_GRACE_SECONDS = _env_float("MINIHTTP_SHUTDOWN_GRACE_SECONDS", 5.0)

HEADER_DELIMITER = b"\r\n\r\n"
ECHO_ENDPOINT_PREFIX = "/echo/"
FILES_ENDPOINT_PREFIX = "/files/"


class ConfigError(ValueError):
    """Raised when startup arguments cannot produce a usable configuration."""


@dataclass(frozen=True)
class ServerConfig:
    """Read-only settings shared by the dispatcher and every worker."""

    files_root: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    worker_count: int = DEFAULT_WORKERS
    read_timeout: float = DEFAULT_READ_TIMEOUT
    idle_timeout: float = DEFAULT_IDLE_TIMEOUT
    read_buffer_size: int = DEFAULT_READ_BUFFER_SIZE
    shutdown_grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS


def parse_cli_args(argv: list[str]) -> argparse.Namespace:
    """Return parsed CLI arguments for server configuration."""
    parser = build_arg_parser()
    return parser.parse_args(argv)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Minimal HTTP/1.1 file server")
    parser.add_argument(
        "--directory",
        required=True,
        help="Directory served and written by the /files/ endpoints",
    )
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        help="Number of connection worker threads",
    )
    parser.add_argument(
        "--read-timeout",
        type=float,
        default=DEFAULT_READ_TIMEOUT,
        help="Seconds a single socket read blocks before rechecking shutdown",
    )
    parser.add_argument(
        "--idle-timeout",
        type=float,
        default=DEFAULT_IDLE_TIMEOUT,
        help="Seconds a kept-alive connection may wait for its next request",
    )
    parser.add_argument(
        "--read-buffer-size",
        type=int,
        default=DEFAULT_READ_BUFFER_SIZE,
        help="Maximum request size in bytes (one read per request)",
    )
    parser.add_argument(
        "--shutdown-grace-seconds",
        type=float,
        default=DEFAULT_SHUTDOWN_GRACE_SECONDS,
        help="Grace period for in-flight connections on shutdown",
    )
    default_log_level = os.getenv("MINIHTTP_LOG_LEVEL", "INFO").upper()
    default_destination = os.getenv("MINIHTTP_LOG_DESTINATION", "stdout")
    default_log_format = os.getenv("MINIHTTP_LOG_FORMAT", "json").lower()
    parser.add_argument(
        "--log-level",
        default=default_log_level,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
    )
    parser.add_argument(
        "--log-destination",
        default=default_destination,
        help="stdout or a file path",
    )
    parser.add_argument(
        "--log-format",
        default=default_log_format,
        choices=["json", "text"],
        type=str.lower,
    )
    return parser


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Validate parsed arguments and freeze them into a ServerConfig."""
    files_root = Path(args.directory)
    if not files_root.is_dir():
        raise ConfigError(f"--directory is not an existing directory: {args.directory}")
    if args.workers < 1:
        raise ConfigError("--workers must be at least 1")
    if args.read_timeout <= 0 or args.idle_timeout <= 0:
        raise ConfigError("--read-timeout and --idle-timeout must be positive")
    if args.read_buffer_size < 1:
        raise ConfigError("--read-buffer-size must be at least 1")
    return ServerConfig(
        files_root=files_root.resolve(),
        host=args.host,
        port=args.port,
        worker_count=args.workers,
        read_timeout=args.read_timeout,
        idle_timeout=args.idle_timeout,
        read_buffer_size=args.read_buffer_size,
        shutdown_grace_seconds=max(0.0, args.shutdown_grace_seconds),
    )
