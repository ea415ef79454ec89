"""HTTP server supporting echo, user-agent, and file operations."""

import signal
import sys
from typing import Optional

from minihttp.bootstrap.config import (
    ConfigError,
    build_arg_parser,
    build_config,
)
from minihttp.bootstrap.logging_setup import configure_logging
from minihttp.bootstrap.socket_factory import create_server_socket
from minihttp.domain.log_context import get_logger
from minihttp.lifecycle.state import ServerLifecycle
from minihttp.transport.dispatcher import Dispatcher

SERVER_LOGGER = get_logger("server")


def main(argv: Optional[list[str]] = None) -> None:
    """Start the HTTP server and serve connections from the worker pool."""
    parser = build_arg_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level, args.log_destination, args.log_format == "json")

    try:
        config = build_config(args)
    except ConfigError as error:
        parser.error(str(error))

    lifecycle = ServerLifecycle()

    def shutdown_handler(signum: int, _frame) -> None:
        SERVER_LOGGER.info(
            "Received shutdown signal",
            extra={"event": "signal_received", "signal": signum},
        )
        lifecycle.begin_stopping()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    SERVER_LOGGER.info(
        "Starting HTTP server",
        extra={
            "event": "server_starting",
            "host": config.host,
            "port": config.port,
            "directory": config.files_root.as_posix(),
            "workers": config.worker_count,
            "read_timeout": config.read_timeout,
            "idle_timeout": config.idle_timeout,
            "read_buffer_size": config.read_buffer_size,
        },
    )

    try:
        server_socket = create_server_socket(config)
    except OSError as error:
        SERVER_LOGGER.critical(
            "Failed to bind listening socket",
            extra={
                "event": "bind_failed",
                "host": config.host,
                "port": config.port,
                "error": str(error),
            },
        )
        sys.exit(1)

    dispatcher = Dispatcher(config, lifecycle)
    try:
        dispatcher.run(server_socket)
    finally:
        server_socket.close()
        dispatcher.shutdown()


if __name__ == "__main__":
    main()
