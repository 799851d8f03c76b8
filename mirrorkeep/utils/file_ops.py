"""
File Operation Utilities

Provides the filesystem primitives the sync engine is built on: idempotent
directory creation, metadata-preserving atomic copies and moves.

Author: mirrorkeep Project
License: MIT
"""

import os
import shutil
from pathlib import Path
from typing import Union

from .logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, os.PathLike]

PARTIAL_SUFFIX = ".mirrorkeep-partial"


def ensure_directory(directory: PathLike) -> Path:
    """
    Ensure a directory exists, creating it and its parents if necessary.

    Safe to call concurrently for the same or overlapping paths: a
    directory that already exists is not an error.

    Args:
        directory: Directory path

    Returns:
        The directory as a Path

    Raises:
        OSError: If the directory cannot be created or a non-directory
            occupies the path
    """
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    return path


def partial_path_for(destination: PathLike) -> Path:
    """Temporary sibling a copy is written to before being renamed into place."""
    destination = Path(destination)
    return destination.with_name(f".{destination.name}{PARTIAL_SUFFIX}")


def clear_empty_directory(path: PathLike) -> None:
    """
    Remove a directory blocking a file destination, if and only if it is empty.

    Raises:
        IsADirectoryError: If the directory has contents
    """
    path = Path(path)
    try:
        path.rmdir()
    except OSError as e:
        raise IsADirectoryError(
            f"Destination is a non-empty directory: {path}"
        ) from e
    logger.info(f"Removed empty directory in place of file: {path}")


def copy_file(source: PathLike, destination: PathLike) -> Path:
    """
    Copy a file with its metadata, replacing any existing destination file.

    The data is written to a temporary sibling first and renamed over the
    destination, so an interrupted copy never leaves a truncated file at
    ``destination``.

    Args:
        source: Source file path
        destination: Destination file path

    Returns:
        The destination path

    Raises:
        OSError: If the copy fails; the partial file is cleaned up
    """
    source = Path(source)
    destination = Path(destination)

    ensure_directory(destination.parent)

    if destination.is_dir() and not destination.is_symlink():
        clear_empty_directory(destination)

    partial = partial_path_for(destination)
    try:
        shutil.copy2(source, partial)
        os.replace(partial, destination)
    except BaseException:
        try:
            partial.unlink()
        except FileNotFoundError:
            pass
        raise

    logger.debug(f"Copied: {source} -> {destination}")
    return destination


def move_file(source: PathLike, destination: PathLike) -> Path:
    """
    Move a file, creating the destination's parent directories.

    Uses a rename when both paths are on the same filesystem and falls back
    to copy-then-remove across devices.

    Args:
        source: File to move
        destination: New path, which must not already exist

    Returns:
        The destination path

    Raises:
        FileExistsError: If something already occupies ``destination``
        OSError: If the move fails
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_file():
        raise FileNotFoundError(f"Source file not found: {source}")
    if os.path.lexists(destination):
        raise FileExistsError(f"Refusing to overwrite: {destination}")

    ensure_directory(destination.parent)
    shutil.move(str(source), str(destination))

    logger.debug(f"Moved: {source} -> {destination}")
    return destination
