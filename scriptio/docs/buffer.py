from __future__ import annotations

import os
import shutil
import tempfile
import time
from typing import Optional

from scriptio.errors import IOFailure
from scriptio.logconf import get_logger

logger = get_logger(__name__)


def atomic_write(path: str, data: bytes) -> str:
    """Write data to path via a sibling temp file and os.replace.

    The destination is either untouched or fully written; the temp file is
    removed on every failure path.
    """
    directory = os.path.dirname(os.path.abspath(path))
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=directory)
    except OSError as exc:
        raise IOFailure(f"Cannot create output file in {directory}: {exc}", details={"path": path}) from exc

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException as exc:
        try:
            os.unlink(tmp_path)
        except FileNotFoundError:
            pass
        if isinstance(exc, OSError):
            raise IOFailure(f"Failed to write {path}: {exc}", details={"path": path}) from exc
        raise
    return path


class ExportBuffer:
    """Session directory under the system temp dir for export hand-off files.

    Debug mode keeps the directory on disk; otherwise cleanup() removes it.
    """

    def __init__(self, base_dir: Optional[str] = None, debug: bool = False) -> None:
        self.debug = bool(debug)
        root = base_dir or os.path.join(tempfile.gettempdir(), "scriptio")
        os.makedirs(root, exist_ok=True)
        ts = time.strftime("%Y%m%d-%H%M%S")
        self.base_dir = tempfile.mkdtemp(prefix=f"{ts}-", dir=root)

    def path(self, *parts: str) -> str:
        p = os.path.join(self.base_dir, *parts)
        os.makedirs(os.path.dirname(p), exist_ok=True)
        return p

    def write_atomic(self, name: str, data: bytes) -> str:
        return atomic_write(self.path(name), data)

    def cleanup(self) -> None:
        if self.debug:
            logger.debug("Keeping export buffer %s", self.base_dir)
            return
        shutil.rmtree(self.base_dir, ignore_errors=True)

    def __enter__(self) -> "ExportBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()
