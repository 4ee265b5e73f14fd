"""Photo gallery generator.

The :class:`Generator` turns the originals stored under ``pics/original`` on a
backend into a static website on the same backend.

Pipeline
--------
:meth:`Generator.generate` runs these steps strictly in order:

1. Copy the static assets of both template bundles to ``assets/homepage``
   and ``assets/album``.
2. List the albums.
3. Parse the album and homepage templates.
4. For every album: write a thumbnail and a large variant of every picture
   to ``pics/resized/...`` and render ``<album>/index.html``.
5. Render the homepage to ``index.html``.

The first error aborts the run and is raised unchanged.  Files written
before the error are left in place; running the generator again is the way
to recover, and a second run over unchanged originals writes byte-identical
files because every target is overwritten unconditionally.

Cancellation
------------
A :class:`CancellationToken` may be passed to the generator.  The pipeline
checks it before every storage operation and raises
:class:`~picgallery.core.exceptions.GenerationCancelled` once it is set.

Usage Example
-------------
    >>> from picgallery.backends import LocalBackend
    >>> from picgallery.core.generator import Generator
    >>> report = Generator(LocalBackend("/srv/gallery")).generate()
    >>> print(report.albums, report.pictures)
"""

from __future__ import annotations

import logging
import posixpath
import threading
from dataclasses import dataclass
from typing import Any, Mapping

from picgallery.backends.base import BackendBase, original_path
from picgallery.core.config import DEFAULT_TITLE

from . import resize
from .exceptions import GenerationCancelled
from .models import Album
from .site_template import PageTemplate, SiteTemplate, load_site_template

logger = logging.getLogger(__name__)

ASSET_DESTINATIONS = {
    "homepage": "assets/homepage",
    "album": "assets/album",
}
HOMEPAGE_PATH = "index.html"


class CancellationToken:
    """Thread-safe flag used to cancel a running generation."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise GenerationCancelled("Gallery generation was cancelled")


@dataclass
class GenerationReport:
    """Counts of what a generation run wrote."""

    assets: int = 0
    albums: int = 0
    pictures: int = 0
    images: int = 0
    pages: int = 0


class Generator:
    """Photo gallery generator working against a storage backend."""

    def __init__(
        self,
        backend: BackendBase,
        site_template: SiteTemplate | None = None,
        title: str = DEFAULT_TITLE,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            backend: Backend holding the originals and receiving the site.
            site_template: Template bundle; defaults to the bundled one.
            title: Title rendered on the homepage.
            cancel_token: Optional token to cancel a running generation.
        """
        self.backend = backend
        self.site_template = site_template or load_site_template()
        self.title = title
        self.cancel_token = cancel_token or CancellationToken()

    def generate(self) -> GenerationReport:
        """Generate the whole gallery website.

        Returns:
            Report of the files written.

        Raises:
            PicGalleryError: Any storage, image, template or cancellation
                error, raised as soon as it occurs.
        """
        report = GenerationReport()

        for bundle, destination in ASSET_DESTINATIONS.items():
            report.assets += self._copy_assets(bundle, destination)

        logger.info("Listing albums...")
        self.cancel_token.raise_if_cancelled()
        albums = self.backend.get_albums()
        logger.info(f"Found {len(albums)} albums")

        album_page = self.site_template.parse_page("album")
        homepage = self.site_template.parse_page("homepage")

        for album in albums:
            report.images += self._create_resized_images(album)
            report.pictures += len(album.pictures)

            self._write_page(
                album_page,
                {"AlbumName": album.name, "Pictures": list(album.pictures)},
                posixpath.join(album.name, "index.html"),
            )
            report.pages += 1
            report.albums += 1

        self._write_page(homepage, {"Title": self.title, "Albums": albums}, HOMEPAGE_PATH)
        report.pages += 1

        logger.info(
            f"Generated {report.pages} pages and {report.images} images "
            f"for {report.albums} albums"
        )
        return report

    def _copy_assets(self, bundle: str, destination: str) -> int:
        logger.info(f"Copying assets to {destination}...")

        files = self.site_template.asset_files(bundle)
        for relative_path, content in files:
            dest = posixpath.join(destination, relative_path)
            logger.debug(f"Copying asset file {dest}...")
            self._write_bytes(dest, content)

        return len(files)

    def _create_resized_images(self, album: Album) -> int:
        written = 0
        for picture in album.pictures:
            self.cancel_token.raise_if_cancelled()
            with self.backend.open_file(original_path(album.name, picture)) as reader:
                data = reader.read()

            original = resize.decode(data, picture)
            image_format = resize.format_from_filename(picture)

            self._write_image(
                resize.thumbnail(original), image_format, album.name, picture, resize.THUMBNAIL_SIZE
            )
            # the large variant keeps the aspect ratio; only the height is fixed
            self._write_image(
                resize.large(original), image_format, album.name, picture, resize.LARGE_SIZE_LABEL
            )
            written += 2

        return written

    def _write_image(
        self, image, image_format: str, album: str, picture: str, size: tuple[int, int]
    ) -> None:
        image_path = resize.resized_path(size, album, picture)
        logger.info(f"Writing image file {image_path}...")
        self._write_bytes(image_path, resize.encode(image, image_format))

    def _write_page(self, template: PageTemplate, context: Mapping[str, Any], dest: str) -> None:
        logger.info(f"Writing HTML file {dest}...")
        html = template.render(context)
        self._write_bytes(dest, html.encode("utf-8"))

    def _write_bytes(self, dest: str, content: bytes) -> None:
        self.cancel_token.raise_if_cancelled()
        with self.backend.create_file(dest) as writer:
            writer.write(content)
