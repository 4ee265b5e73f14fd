"""Local filesystem backend.

The gallery is a directory tree rooted at ``root_dir``; storage paths map
directly onto it.  Writes go to a temporary file next to the target and are
moved into place with :func:`os.replace` on commit, which gives the local
variant the same "nothing visible until commit" behaviour as the object
store.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO

from picgallery.core.config import GalleryConfig
from picgallery.core.exceptions import ListingError, StorageReadError, StorageWriteError

from .base import ORIGINALS_ROOT, BackendBase, StorageWriter, backend_registry, original_path

logger = logging.getLogger(__name__)


def _read_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Process umask, read once at import; os.umask can only be read by setting it
_UMASK = _read_umask()


class LocalFileWriter(StorageWriter):
    """Writer that renames a temporary sibling file into place on commit."""

    def __init__(self, path: str, target: Path) -> None:
        super().__init__(path)
        self.target = target
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        self._tmp_path = Path(tmp_name)
        self._file = os.fdopen(fd, "wb")

    def _write(self, data: bytes) -> int:
        try:
            return self._file.write(data)
        except OSError as e:
            raise StorageWriteError(f"Failed to write {self.path}: {e}", path=self.path) from e

    def _commit(self) -> None:
        try:
            self._file.close()
            # mkstemp creates owner-only files; use the mode open() would give
            os.chmod(self._tmp_path, 0o666 & ~_UMASK)
            os.replace(self._tmp_path, self.target)
        except OSError as e:
            self._discard()
            raise StorageWriteError(f"Failed to commit {self.path}: {e}", path=self.path) from e

    def _abort(self) -> None:
        self._file.close()
        self._discard()
        logger.debug(f"Discarded partial write to {self.path}")

    def _discard(self) -> None:
        self._tmp_path.unlink(missing_ok=True)


@backend_registry.register
class LocalBackend(BackendBase):
    """Backend for the local file system rooted at ``root_dir``."""

    name = "local"
    description = "Local file system directory"

    def __init__(self, root_dir: str | Path) -> None:
        self.root_dir = Path(root_dir)
        logger.info(f"Using local backend rooted at {self.root_dir}")

    @classmethod
    def from_config(cls, config: GalleryConfig) -> LocalBackend:
        return cls(config.root_dir)

    def _resolve(self, path: str) -> Path:
        return self.root_dir.joinpath(*path.split("/"))

    def _list_dir(self, path: str) -> list[os.DirEntry]:
        directory = self._resolve(path)
        try:
            with os.scandir(directory) as entries:
                return list(entries)
        except OSError as e:
            raise ListingError(f"Failed to list {directory}: {e}", path=path) from e

    def _list_album_names(self) -> Iterable[str]:
        return [entry.name for entry in self._list_dir(ORIGINALS_ROOT) if entry.is_dir()]

    def _list_picture_names(self, album: str) -> Iterable[str]:
        return [entry.name for entry in self._list_dir(original_path(album)) if not entry.is_dir()]

    def create_file(self, path: str) -> LocalFileWriter:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            return LocalFileWriter(path, target)
        except OSError as e:
            raise StorageWriteError(f"Failed to create {target}: {e}", path=path) from e

    def open_file(self, path: str) -> BinaryIO:
        source = self._resolve(path)
        try:
            return open(source, "rb")
        except OSError as e:
            raise StorageReadError(f"Failed to open {source}: {e}", path=path) from e
