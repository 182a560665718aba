"""Filesystem helpers shared by the cache and artifact stores."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def ensure_directory(path: Path) -> bool:
    """Create ``path`` (and parents) if missing. Failures are logged, not raised."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Error creating directory %s: %s", path, exc)
        return False
    return True


def atomic_write_bytes(dst: Path, data: bytes) -> None:
    """Write ``data`` to ``dst`` via a sibling temp file and rename.

    Readers see either the previous file or the complete new one.
    Raises OSError if the write or rename fails; the temp file is removed.
    """
    dst.parent.mkdir(parents=True, exist_ok=True)
    temp_path = dst.parent / f".{dst.name}.tmp"
    try:
        temp_path.write_bytes(data)
        os.replace(temp_path, dst)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
