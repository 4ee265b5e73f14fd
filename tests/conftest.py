"""Shared pytest fixtures for picgallery tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest
from PIL import Image

from picgallery.backends.local import LocalBackend
from picgallery.core.config import GalleryConfig


def make_image_bytes(size: tuple[int, int] = (800, 600), fmt: str = "JPEG", color=(200, 40, 40)) -> bytes:
    """Encode a solid-color test image.

    Args:
        size: Image width and height in pixels
        fmt: Pillow format name
        color: Fill color

    Returns:
        Encoded image bytes
    """
    mode = "RGBA" if fmt == "PNG" else "RGB"
    fill = (*color, 255) if mode == "RGBA" else color
    buffer = io.BytesIO()
    Image.new(mode, size, color=fill).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    """Expose :func:`make_image_bytes` to test modules."""
    return make_image_bytes


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path, monkeypatch) -> GalleryConfig:
    """Create a local-backend configuration rooted in the temp directory.

    PICGALLERY_* variables from the developer's environment are cleared so
    tests see the declared defaults.
    """
    for name in ("BACKEND", "BUCKET", "ACCESS_KEY_ID", "SECRET_ACCESS_KEY", "TITLE", "LOG_LEVEL"):
        monkeypatch.delenv(f"PICGALLERY_{name}", raising=False)

    return GalleryConfig(root_dir=str(temp_dir / "site"), _env_file=None)


@pytest.fixture
def add_original(temp_dir: Path) -> Callable[..., Path]:
    """Return a helper that writes an original picture under the site root.

    The helper takes ``(album, picture, data=None)`` and writes
    ``site/pics/original/<album>/<picture>``; ``data`` defaults to a JPEG.
    """

    def _add(album: str, picture: str, data: bytes | None = None) -> Path:
        path = temp_dir / "site" / "pics" / "original" / album / picture
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(make_image_bytes() if data is None else data)
        return path

    return _add


@pytest.fixture
def site_root(temp_dir: Path) -> Path:
    """Create an empty originals root and return the site directory."""
    root = temp_dir / "site"
    (root / "pics" / "original").mkdir(parents=True)
    return root


@pytest.fixture
def local_backend(site_root: Path) -> LocalBackend:
    """Local backend rooted at the site directory."""
    return LocalBackend(site_root)
