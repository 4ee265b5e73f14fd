"""Image decoding, resizing and encoding.

Every picture gets two derivatives:

- a thumbnail cropped to exactly 360x225 for album grids and the homepage
- a large variant scaled to a height of 750 with its aspect ratio kept

The large variant is stored under a ``1200x750`` path label even though only
its height is fixed; the label is kept so existing sites and their templates
keep working.

Derivatives are re-encoded in the format implied by the picture's filename
extension.  Encoding goes through an in-memory buffer so that formats needing
a seekable output work the same against every backend.
"""

import io
import logging
import posixpath

from PIL import Image, ImageOps, UnidentifiedImageError

from .exceptions import DecodeError, EncodeError

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = (360, 225)
LARGE_HEIGHT = 750
LARGE_SIZE_LABEL = (1200, 750)

RESAMPLING = Image.Resampling.LANCZOS

# Extensions recognised for output, mapped to Pillow format names
FORMATS_BY_EXTENSION = {
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
    ".gif": "GIF",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".bmp": "BMP",
    ".webp": "WEBP",
}

# Modes each format can store directly; anything else is converted first
_SAVEABLE_MODES = {
    "JPEG": {"RGB", "L", "CMYK"},
    "BMP": {"RGB", "L", "P", "1"},
}


def size_label(size: tuple[int, int]) -> str:
    """Return the path label of a size class, e.g. ``360x225``."""
    return f"{size[0]}x{size[1]}"


def resized_path(size: tuple[int, int], album: str, picture: str) -> str:
    """Return the storage path of a resized picture."""
    return posixpath.join("pics", "resized", size_label(size), album, picture)


def format_from_filename(filename: str) -> str:
    """Infer the Pillow image format from a filename extension.

    Raises:
        EncodeError: If the extension is not a supported image format.
    """
    extension = posixpath.splitext(filename)[1].lower()
    try:
        return FORMATS_BY_EXTENSION[extension]
    except KeyError:
        raise EncodeError(f"Unsupported image format for {filename!r}") from None


def decode(data: bytes, filename: str) -> Image.Image:
    """Decode an original picture fully into memory.

    Raises:
        DecodeError: If the data is not a readable image.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            # palette images only resample with NEAREST
            if image.mode == "P":
                return image.convert("RGBA")
            return image.copy()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to decode {filename}: {e}") from e


def thumbnail(image: Image.Image) -> Image.Image:
    """Scale and center-crop an image to exactly :data:`THUMBNAIL_SIZE`."""
    return ImageOps.fit(image, THUMBNAIL_SIZE, method=RESAMPLING, centering=(0.5, 0.5))


def large(image: Image.Image) -> Image.Image:
    """Scale an image to :data:`LARGE_HEIGHT`, keeping its aspect ratio.

    The width is rounded half up, so 1001x1500 becomes 501x750.
    """
    width, height = image.size
    new_width = max(1, int(width * LARGE_HEIGHT / height + 0.5))
    return image.resize((new_width, LARGE_HEIGHT), RESAMPLING)


def encode(image: Image.Image, image_format: str) -> bytes:
    """Encode an image in the given Pillow format.

    Raises:
        EncodeError: If Pillow cannot write the image in that format.
    """
    saveable = _SAVEABLE_MODES.get(image_format)
    if saveable is not None and image.mode not in saveable:
        image = image.convert("RGB")

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=image_format)
    except (OSError, ValueError, KeyError) as e:
        raise EncodeError(f"Failed to encode image as {image_format}: {e}") from e
    return buffer.getvalue()
