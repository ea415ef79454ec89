"""Shared fixtures for unit tests."""

import logging
from pathlib import Path

import pytest

from minihttp.bootstrap.config import ServerConfig


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Ensure logs propagate to root so caplog can catch them."""
    logger = logging.getLogger("minihttp")
    old_propagate = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = old_propagate


@pytest.fixture(name="config")
def fixture_config(tmp_path: Path) -> ServerConfig:
    """ServerConfig rooted at a fresh temporary directory."""
    return ServerConfig(
        files_root=tmp_path,
        worker_count=2,
        read_timeout=1.0,
        idle_timeout=1.0,
        read_buffer_size=1024,
        shutdown_grace_seconds=1.0,
    )
