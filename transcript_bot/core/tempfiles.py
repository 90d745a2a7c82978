"""Collision-resistant temporary file names and best-effort deletion.

WHY: Several pipeline runs can download captions and audio at the same
time. Each run needs its own file names, and the files must not pile up
on disk once their contents have been read.

HOW: unique_temp_path() builds ``<tmpdir>/<prefix><epoch-ms>-<5 digits><suffix>``.
delete_file() removes a file and, when that fails, remembers the path
and retries at interpreter exit via atexit.

RULES:
- Paths are only generated, never created; the external tool writes them
- delete_file() never raises; failures are logged as warnings
- Paths that could not be deleted are retried once at process shutdown
"""

from __future__ import annotations

import atexit
import logging
import random
import tempfile
import threading
import time
from pathlib import Path
from typing import Set

logger = logging.getLogger(__name__)

_pending_deletes: Set[Path] = set()
_pending_lock = threading.Lock()


def unique_temp_path(
    prefix: str = "youtube_",
    suffix: str = "",
    directory: Path | None = None,
) -> Path:
    """Return a fresh path in ``directory`` (default: the system temp directory)."""
    millis = int(time.time() * 1000)
    digits = "".join(random.choice("0123456789") for _ in range(5))
    base = directory if directory is not None else Path(tempfile.gettempdir())
    return base / f"{prefix}{millis}-{digits}{suffix}"


def delete_file(path: Path) -> bool:
    """Delete a file, deferring to shutdown if it cannot be removed now.

    RULES:
    - Returns True if the file is gone (deleted or never existed)
    - Returns False and schedules an exit-time retry on OSError

    Args:
        path: File to delete.

    Returns:
        Whether the file no longer exists.
    """
    try:
        path.unlink()
    except FileNotFoundError:
        return True
    except OSError as exc:
        logger.warning("Could not immediately delete file %s: %s", path, exc)
        _schedule_delete_on_exit(path)
        return False
    logger.debug("Deleted temp file %s", path)
    return True


def _schedule_delete_on_exit(path: Path) -> None:
    with _pending_lock:
        _pending_deletes.add(path)


def pending_deletes() -> Set[Path]:
    """Snapshot of paths waiting for exit-time deletion."""
    with _pending_lock:
        return set(_pending_deletes)


@atexit.register
def _delete_pending() -> None:
    with _pending_lock:
        paths = list(_pending_deletes)
        _pending_deletes.clear()
    for path in paths:
        try:
            path.unlink()
        except OSError:
            pass  # last chance at shutdown
