"""Filesystem sandbox utilities for safe path resolution."""

from pathlib import Path
from typing import Union


class ForbiddenPath(Exception):
    """Raised when a requested path escapes the configured sandbox."""


def resolve_files_path(files_root: Union[str, Path], name: str) -> Path:
    """Resolve a client-supplied file name inside ``files_root``.

    The name is joined as given (no URL decoding). Any ``..`` segment, an
    empty name, or a target outside the root after symlink resolution is
    rejected.
    """
    if not name or "\x00" in name:
        raise ForbiddenPath(name)

    if ".." in Path(name).parts:
        raise ForbiddenPath(name)

    root = Path(files_root).resolve()
    target = (root / name).resolve()
    if root not in target.parents:
        raise ForbiddenPath(name)

    return target
