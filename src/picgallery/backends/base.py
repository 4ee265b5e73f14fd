"""Base classes and registry for storage backends.

A backend is where the gallery lives: the original pictures are read from it
and every generated file (resized pictures, pages, static assets) is written
back to it.  Two variants exist, a local filesystem and an S3-compatible
object store, and the generator works against either through the interface
defined here.

Listing Semantics
-----------------
Listings are shared by all variants and implemented once in
:class:`BackendBase`:

- albums are the sub-containers of ``pics/original/``
- pictures are the leaf items directly inside an album container
- names starting with ``.`` are never listed
- albums without pictures are never returned
- results are always sorted alphabetically

Variants only enumerate raw names (``_list_album_names`` and
``_list_picture_names``); raw enumeration order differs between mediums, so
the sorting here is what keeps output identical across backends.

Writers
-------
:meth:`BackendBase.create_file` returns a :class:`StorageWriter`.  Data
written to it becomes visible only when the writer is committed, which
happens when it is closed or when its ``with`` block exits normally.  A
``with`` block that exits with an exception aborts the writer instead, so a
failed write never leaves a partial file behind.

Usage Example
-------------
    >>> from picgallery.backends import backend_registry
    >>> backend = backend_registry.instantiate("local", config)
    >>> for album in backend.get_albums():
    ...     print(album.name, album.cover_image)
    >>> with backend.create_file("vacation/index.html") as writer:
    ...     writer.write(b"<html>...</html>")
"""

from __future__ import annotations

import logging
import posixpath
from abc import ABC, abstractmethod
from collections.abc import Iterable
from types import TracebackType
from typing import BinaryIO

from picgallery.core.config import GalleryConfig
from picgallery.core.exceptions import StorageWriteError
from picgallery.core.models import Album

logger = logging.getLogger(__name__)

ORIGINALS_ROOT = "pics/original"
HIDDEN_PREFIX = "."


def original_path(album: str, picture: str | None = None) -> str:
    """Return the storage path of an album container or one of its originals."""
    if picture is None:
        return posixpath.join(ORIGINALS_ROOT, album)
    return posixpath.join(ORIGINALS_ROOT, album, picture)


def is_hidden(name: str) -> bool:
    """Check whether a listed name is hidden."""
    return name.startswith(HIDDEN_PREFIX)


class StorageWriter(ABC):
    """Writable stream whose content is published on commit.

    Subclasses implement :meth:`_write`, :meth:`_commit` and :meth:`_abort`.
    The public methods track state so that a writer is committed or aborted
    at most once and never written to afterwards.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        if self._closed:
            raise StorageWriteError(f"Write to closed file {self.path}", path=self.path)
        return self._write(data)

    def close(self) -> None:
        """Commit the written data. Calling it again is a no-op."""
        if self._closed:
            return
        self._closed = True
        self._commit()

    def abort(self) -> None:
        """Discard the written data without publishing it."""
        if self._closed:
            return
        self._closed = True
        self._abort()

    def __enter__(self) -> StorageWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    @abstractmethod
    def _write(self, data: bytes) -> int:
        pass

    @abstractmethod
    def _commit(self) -> None:
        pass

    @abstractmethod
    def _abort(self) -> None:
        pass


class BackendBase(ABC):
    """Abstract base class for storage backends.

    Each backend must implement:
    - Raw enumeration of album containers and album leaf items
    - Creating files for writing (commit on close)
    - Opening files for reading

    Paths passed to backends are ``/``-separated and relative to the gallery
    root, e.g. ``pics/resized/360x225/vacation/a.jpg``.

    Attributes
    ----------
    name : str
        Registry name of the backend (``"local"``, ``"s3"``)
    description : str
        Brief description of the storage medium
    """

    name: str = "base"
    description: str = "Base class for storage backends"

    @classmethod
    @abstractmethod
    def from_config(cls, config: GalleryConfig) -> BackendBase:
        """Create a backend from the gallery configuration.

        Raises
        ------
        ConfigurationError
            If a setting the backend needs is missing
        """
        pass

    def get_albums(self) -> list[Album]:
        """Return all non-empty albums of the gallery, sorted by name.

        Raises
        ------
        ListingError
            If the originals root or an album container cannot be enumerated
        """
        albums = []
        for name in sorted(self._list_album_names()):
            if is_hidden(name):
                continue

            pictures = self.get_pictures(name)
            if not pictures:
                logger.warning(f"Skipping empty album: {name}")
                continue

            albums.append(Album.from_pictures(name, pictures))

        logger.debug(f"Listed {len(albums)} albums")
        return albums

    def get_pictures(self, album: str) -> list[str]:
        """Return the picture filenames of an album, sorted by name.

        Raises
        ------
        ListingError
            If the album container cannot be enumerated
        """
        return sorted(name for name in self._list_picture_names(album) if not is_hidden(name))

    @abstractmethod
    def create_file(self, path: str) -> StorageWriter:
        """Create a file for writing, replacing any existing file at ``path``.

        Raises
        ------
        StorageWriteError
            If the file cannot be created
        """
        pass

    @abstractmethod
    def open_file(self, path: str) -> BinaryIO:
        """Open a file for reading.

        The returned stream must be closed by the caller, preferably with a
        ``with`` block.

        Raises
        ------
        StorageReadError
            If the file does not exist or cannot be opened
        """
        pass

    @abstractmethod
    def _list_album_names(self) -> Iterable[str]:
        """Enumerate sub-container names directly under the originals root."""
        pass

    @abstractmethod
    def _list_picture_names(self, album: str) -> Iterable[str]:
        """Enumerate leaf item names directly inside an album container."""
        pass


class BackendRegistry:
    """Registry for the available storage backends.

    The registry maps backend names to classes so that the variant can be
    chosen by configuration once at startup and then injected into the
    generator.
    """

    def __init__(self) -> None:
        self._backends: dict[str, type[BackendBase]] = {}

    def register(self, backend_class: type[BackendBase]) -> type[BackendBase]:
        """Register a backend class. Usable as a class decorator."""
        backend_name = backend_class.name

        if backend_name in self._backends:
            logger.warning(f"Backend '{backend_name}' is already registered, overwriting")

        self._backends[backend_name] = backend_class
        logger.debug(f"Registered backend: {backend_name}")
        return backend_class

    def instantiate(self, backend_name: str, config: GalleryConfig) -> BackendBase:
        """Create an instance of a registered backend.

        Raises
        ------
        KeyError
            If backend_name is not registered
        ConfigurationError
            If the configuration lacks settings the backend needs
        """
        if backend_name not in self._backends:
            available = ", ".join(self.list_available())
            raise KeyError(f"Backend '{backend_name}' not found. Available backends: {available}")

        instance = self._backends[backend_name].from_config(config)
        logger.info(f"Instantiated backend: {backend_name}")
        return instance

    def list_available(self) -> list[str]:
        return list(self._backends.keys())


# Global backend registry instance
backend_registry = BackendRegistry()
