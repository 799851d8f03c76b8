"""
Tombstone Naming

Derives where a removed or superseded backup file is kept. Names preserve
the file's relative directory structure and carry a UTC timestamp suffix.

Author: mirrorkeep Project
License: MIT
"""

import os
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Union

SUFFIX_SEPARATOR = "~"
TIMESTAMP_FORMAT = "%Y%m%dT%H%M%S%fZ"


def format_instant(now: datetime) -> str:
    """Render an instant as a UTC suffix; naive datetimes are taken as UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


def name_for(
    relative_path: str,
    tombstone_root: Union[str, os.PathLike],
    now: datetime
) -> Path:
    """
    Choose a free tombstone path for ``relative_path``.

    ``a/b.txt`` at 2026-10-18 01:56:00.123456 UTC becomes
    ``<tombstone_root>/a/b.txt~20261018T015600123456Z``. When that name is
    already taken a counter is appended (``...Z-1``, ``...Z-2``) until a free
    name is found, so earlier tombstones are never overwritten.

    Args:
        relative_path: POSIX path of the file relative to the tree roots
        tombstone_root: Root of the tombstone tree
        now: Instant of the relocation

    Returns:
        A path under ``tombstone_root`` that did not exist at call time
    """
    base = Path(tombstone_root).joinpath(*PurePosixPath(relative_path).parts)
    stem = f"{base.name}{SUFFIX_SEPARATOR}{format_instant(now)}"

    candidate = base.with_name(stem)
    counter = 1
    while os.path.lexists(candidate):
        candidate = base.with_name(f"{stem}-{counter}")
        counter += 1

    return candidate
