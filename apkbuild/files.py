"""Filesystem helpers for build inputs and temporary artifacts."""

from __future__ import annotations

import logging
import os
import shutil
import stat

from apkbuild.exceptions import FilesystemError

logger = logging.getLogger(__name__)

JAVA_SUFFIX = ".java"


def find_java_sources(root: str) -> list[str]:
    """
    Recursively collect Java source files under a directory.

    Directories are traversed but never collected. Any error raised while
    walking (including a missing root) is fatal.

    Returns:
        Sorted list of paths, each prefixed with root.
    """

    def _raise(error: OSError) -> None:
        raise FilesystemError(
            f"Received error when finding Java source files under '{root}': {error}",
            path=getattr(error, "filename", None) or str(root),
            cause=error,
        ) from error

    # os.walk silently yields nothing for a missing root unless onerror raises
    paths = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for name in filenames:
            if name.endswith(JAVA_SUFFIX):
                paths.append(os.path.join(dirpath, name))

    logger.debug(f"Found {len(paths)} Java source files under {root}")
    return sorted(paths)


def make_output_dirs(*paths: str) -> None:
    """Create each directory; one that already exists counts as created."""
    for path in paths:
        try:
            os.mkdir(path, 0o774)
        except FileExistsError as e:
            if not os.path.isdir(path):
                raise FilesystemError(
                    f"Could not create directory at '{path}': a file is in the way",
                    path=str(path),
                    cause=e,
                ) from e
        except OSError as e:
            raise FilesystemError(
                f"Could not create directory at '{path}': {e}",
                path=str(path),
                cause=e,
            ) from e


def remove_paths(*paths: str) -> None:
    """
    Remove files and directory trees in order.

    Stops at the first path that cannot be stat'ed or removed; later paths
    are left in place.
    """
    for path in paths:
        try:
            is_dir = stat.S_ISDIR(os.stat(path).st_mode)
        except OSError as e:
            raise FilesystemError(
                f"Could not stat file at '{path}': {e}",
                path=str(path),
                cause=e,
            ) from e

        try:
            if is_dir:
                shutil.rmtree(path)
            else:
                os.remove(path)
        except OSError as e:
            kind = "directory" if is_dir else "file"
            raise FilesystemError(
                f"Could not remove {kind} at '{path}': {e}",
                path=str(path),
                cause=e,
            ) from e
        logger.debug(f"Removed {path}")
