"""Local filesystem implementation of the file store."""

import os
import tempfile
from pathlib import Path


class LocalFileStore:
    """Stores files as flat names under a single directory.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a name is either absent or complete.
    """

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def save(self, name: str, data: bytes) -> None:
        target = self._path(name)
        fd, tmp_path = tempfile.mkstemp(dir=self._root, prefix=".staging-")
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, target)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def delete(self, name: str) -> bool:
        try:
            self._path(name).unlink()
        except FileNotFoundError:
            return False
        return True

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def read(self, name: str) -> bytes:
        return self._path(name).read_bytes()

    def _path(self, name: str) -> Path:
        # Only flat names; anything path-like is reduced to its final part
        safe = Path(name).name
        if not safe or safe in (".", ".."):
            raise ValueError(f"Invalid file name: {name!r}")
        return self._root / safe
