"""Unit tests for picgallery.core.generator.

The generator runs against an in-memory backend that records every write,
so the tests can check ordering, paths and failure behaviour without
touching the filesystem.
"""

from __future__ import annotations

import io
import posixpath
from typing import Iterable

import pytest
from PIL import Image

from picgallery.backends.base import BackendBase, StorageWriter
from picgallery.core.exceptions import (
    DecodeError,
    EncodeError,
    GenerationCancelled,
    ListingError,
    StorageReadError,
    TemplateParseError,
)
from picgallery.core.generator import CancellationToken, Generator
from picgallery.core.site_template import SiteTemplate


class MemoryWriter(StorageWriter):
    def __init__(self, path: str, backend: MemoryBackend) -> None:
        super().__init__(path)
        self._backend = backend
        self._chunks: list[bytes] = []

    def _write(self, data: bytes) -> int:
        self._chunks.append(data)
        return len(data)

    def _commit(self) -> None:
        self._backend.files[self.path] = b"".join(self._chunks)
        self._backend.writes.append(self.path)

    def _abort(self) -> None:
        self._chunks.clear()


class MemoryBackend(BackendBase):
    """Backend keeping files in a dict; listings come back unsorted."""

    name = "memory"

    def __init__(self, files: dict[str, bytes] | None = None) -> None:
        self.files = dict(files or {})
        self.writes: list[str] = []
        self.reads: list[str] = []

    @classmethod
    def from_config(cls, config):
        return cls()

    def _children(self, prefix: str) -> tuple[set[str], set[str]]:
        containers, leaves = set(), set()
        for key in self.files:
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix):]
            if "/" in rest:
                containers.add(rest.split("/", 1)[0])
            else:
                leaves.add(rest)
        return containers, leaves

    def _list_album_names(self) -> Iterable[str]:
        containers, _ = self._children("pics/original/")
        if not containers:
            raise ListingError("no originals root", path="pics/original")
        return sorted(containers, reverse=True)

    def _list_picture_names(self, album: str) -> Iterable[str]:
        _, leaves = self._children(f"pics/original/{album}/")
        return sorted(leaves, reverse=True)

    def create_file(self, path: str) -> MemoryWriter:
        return MemoryWriter(path, self)

    def open_file(self, path: str):
        if path not in self.files:
            raise StorageReadError(f"missing {path}", path=path)
        self.reads.append(path)
        return io.BytesIO(self.files[path])


def _jpeg(size=(400, 300)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(0, 128, 255)).save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def site_template() -> SiteTemplate:
    """Minimal template bundle with one asset per bundle."""
    return SiteTemplate(
        pages={
            "homepage": "{{ Title }}:{% for a in Albums %}{{ a.Name }}={{ a.CoverImage }};{% endfor %}",
            "album": "{{ AlbumName }}:{% for p in Pictures %}{{ p }};{% endfor %}",
        },
        assets={
            "homepage": (("css/home.css", b"home"),),
            "album": (("js/album.js", b"album"),),
        },
    )


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend(
        {
            "pics/original/vacation/b.jpg": _jpeg(),
            "pics/original/vacation/a.jpg": _jpeg((300, 600)),
            "pics/original/beach/sand.jpg": _jpeg(),
            "pics/original/junk/.DS_Store": b"\x00",
        }
    )


# ============================================================================
# Output Tests
# ============================================================================


class TestGenerate:
    """Tests for a successful generation run."""

    def test_writes_expected_files(self, backend, site_template):
        Generator(backend, site_template, title="T").generate()

        expected = {
            "assets/homepage/css/home.css",
            "assets/album/js/album.js",
            "pics/resized/360x225/beach/sand.jpg",
            "pics/resized/1200x750/beach/sand.jpg",
            "pics/resized/360x225/vacation/a.jpg",
            "pics/resized/360x225/vacation/b.jpg",
            "pics/resized/1200x750/vacation/a.jpg",
            "pics/resized/1200x750/vacation/b.jpg",
            "beach/index.html",
            "vacation/index.html",
            "index.html",
        }
        assert set(backend.writes) == expected
        assert len(backend.writes) == len(expected)

    def test_write_order(self, backend, site_template):
        Generator(backend, site_template).generate()

        assert backend.writes[:2] == ["assets/homepage/css/home.css", "assets/album/js/album.js"]
        assert backend.writes[-1] == "index.html"
        assert backend.writes.index("beach/index.html") < backend.writes.index(
            "pics/resized/360x225/vacation/a.jpg"
        )

    def test_pages_use_sorted_order(self, backend, site_template):
        Generator(backend, site_template, title="T").generate()

        assert backend.files["vacation/index.html"] == b"vacation:a.jpg;b.jpg;"
        assert backend.files["index.html"] == b"T:beach=sand.jpg;vacation=a.jpg;"

    def test_assets_copied_verbatim(self, backend, site_template):
        Generator(backend, site_template).generate()
        assert backend.files["assets/album/js/album.js"] == b"album"

    def test_resized_dimensions(self, backend, site_template):
        Generator(backend, site_template).generate()

        with Image.open(io.BytesIO(backend.files["pics/resized/360x225/vacation/a.jpg"])) as thumb:
            assert thumb.size == (360, 225)
            assert thumb.format == "JPEG"
        with Image.open(io.BytesIO(backend.files["pics/resized/1200x750/vacation/a.jpg"])) as big:
            assert big.size == (375, 750)

    def test_report_counts(self, backend, site_template):
        report = Generator(backend, site_template).generate()

        assert report.assets == 2
        assert report.albums == 2
        assert report.pictures == 3
        assert report.images == 6
        assert report.pages == 3

    def test_second_run_is_identical(self, backend, site_template):
        Generator(backend, site_template).generate()
        first = {k: v for k, v in backend.files.items() if not k.startswith("pics/original")}

        Generator(backend, site_template).generate()
        second = {k: v for k, v in backend.files.items() if not k.startswith("pics/original")}

        assert first == second


# ============================================================================
# Failure Tests
# ============================================================================


class TestGenerateFailures:
    """Every error aborts the run."""

    def test_missing_original_aborts_before_next_album(self, backend, site_template, monkeypatch):
        original_get_albums = backend.get_albums

        def get_albums():
            albums = original_get_albums()
            del backend.files["pics/original/beach/sand.jpg"]
            return albums

        monkeypatch.setattr(backend, "get_albums", get_albums)

        with pytest.raises(StorageReadError):
            Generator(backend, site_template).generate()

        assert not any("vacation" in path for path in backend.writes)
        assert "index.html" not in backend.writes

    def test_listing_error_propagates(self, site_template):
        with pytest.raises(ListingError):
            Generator(MemoryBackend(), site_template).generate()

    def test_corrupt_original_raises_decode_error(self, backend, site_template):
        backend.files["pics/original/beach/sand.jpg"] = b"garbage"
        with pytest.raises(DecodeError):
            Generator(backend, site_template).generate()

    def test_unknown_extension_raises_encode_error(self, backend, site_template):
        backend.files["pics/original/beach/notes.txt"] = _jpeg()
        with pytest.raises(EncodeError):
            Generator(backend, site_template).generate()

    def test_template_parse_error_before_album_processing(self, backend, site_template):
        broken = SiteTemplate(
            pages={"homepage": site_template.pages["homepage"], "album": "{% if %}"},
            assets=site_template.assets,
        )

        with pytest.raises(TemplateParseError):
            Generator(backend, broken).generate()

        assert backend.reads == []
        assert not any(path.startswith("pics/resized") for path in backend.writes)


# ============================================================================
# Cancellation Tests
# ============================================================================


class TestCancellation:
    """Cancellation is observed at storage operations."""

    def test_cancelled_before_start(self, backend, site_template):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(GenerationCancelled):
            Generator(backend, site_template, cancel_token=token).generate()
        assert backend.writes == []

    def test_cancelled_mid_run(self, backend, site_template):
        token = CancellationToken()
        original_open = backend.open_file

        def open_file(path):
            token.cancel()
            return original_open(path)

        backend.open_file = open_file

        with pytest.raises(GenerationCancelled):
            Generator(backend, site_template, cancel_token=token).generate()

        assert token.cancelled
        assert not any(posixpath.basename(p) == "index.html" for p in backend.writes)
