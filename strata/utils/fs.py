"""Atomic file writes for repository metadata.

Object files are written through a temp file and renamed into place.
Index, ref and HEAD files are written through a ``<name>.lock`` file that is
created exclusively and renamed over the target on success, so two writers
cannot interleave their updates.
"""

import os
import tempfile
from pathlib import Path
from typing import Union

from strata.core.errors import LockError

PathLike = Union[str, Path]


def atomic_write(path: PathLike, data: bytes) -> None:
    """
    Write data to path via a temp file in the same directory and a rename.

    Args:
        path: Destination file
        data: Bytes to write

    Raises:
        OSError: If the write or rename fails
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix='.tmp_')
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class LockFile:
    """
    Exclusive lock on a metadata file.

    Usage::

        with LockFile(index_path) as lock:
            lock.write(data)

    The new content becomes visible only when the block exits without an
    exception; otherwise the lock file is removed and the target is left
    untouched.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + '.lock')
        self._fd = None
        self._written = False

    def acquire(self) -> 'LockFile':
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            self._fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            raise LockError(self.lock_path)
        return self

    def write(self, data: bytes) -> None:
        os.write(self._fd, data)
        self._written = True

    def commit(self) -> None:
        """Flush the lock file and rename it over the target."""
        os.fsync(self._fd)
        os.close(self._fd)
        self._fd = None
        os.replace(self.lock_path, self.path)

    def rollback(self) -> None:
        """Release the lock without touching the target."""
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None
        try:
            os.unlink(self.lock_path)
        except FileNotFoundError:
            pass

    def __enter__(self) -> 'LockFile':
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None and self._written:
            self.commit()
        else:
            self.rollback()


def locked_write(path: PathLike, data: bytes) -> None:
    """Replace path with data while holding its lock file."""
    with LockFile(path) as lock:
        lock.write(data)
