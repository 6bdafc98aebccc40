"""Helpers for entity paths (the real files that tree items alias)."""

import os
from pathlib import Path
from typing import Union

PathLike = Union[str, "os.PathLike[str]"]


def is_cwd_relative(path: str) -> bool:
    """True for paths written as ``./x``, ``../x``, ``.x`` or ``/x``."""
    return path.startswith(".") or path.startswith("/")


def resolve_entity_path(entity: PathLike) -> str:
    """Resolve a stored entity to a path usable by other processes.

    Paths starting with ``.`` or ``/`` are joined to the current working
    directory at call time. Anything else is returned unchanged.

    The leading ``.`` or ``/`` is not stripped before joining: ``./x``
    still lands in the working directory, and ``/x`` stays the absolute
    path ``/x`` instead of becoming ``<cwd>/x``.
    """
    entity = os.fspath(entity)
    if is_cwd_relative(entity):
        return os.path.normpath(os.path.join(os.getcwd(), entity))
    return entity


def unique_backing_path(candidate: PathLike) -> str:
    """Find the first unused ``stem-N.ext`` next to ``candidate``.

    Args:
        candidate: Desired backing file path

    Returns:
        ``<dir>/<stem>-0<ext>``, ``<dir>/<stem>-1<ext>``, ... whichever
        does not exist yet. The directory part is kept as written.
    """
    candidate = os.fspath(candidate)
    directory, filename = os.path.split(candidate)
    suffix = Path(filename).suffix
    stem = filename[: len(filename) - len(suffix)] if suffix else filename
    count = 0
    while True:
        path = os.path.join(directory, f"{stem}-{count}{suffix}")
        if not os.path.exists(path):
            return path
        count += 1
