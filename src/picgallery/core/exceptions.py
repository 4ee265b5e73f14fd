"""Exception hierarchy for the gallery generator.

Every failure the pipeline can hit is expressed as a subclass of
:class:`PicGalleryError`.  Library exceptions (``OSError``, botocore errors,
Pillow errors, Jinja2 errors) are translated at the module that talks to the
library, with the original exception chained as ``__cause__``, so callers only
ever need to catch the classes defined here.

Hierarchy
---------
::

    PicGalleryError
    ├── ConfigurationError
    ├── GenerationCancelled
    ├── StorageError
    │   ├── ListingError
    │   ├── StorageReadError
    │   └── StorageWriteError
    ├── ImageError
    │   ├── DecodeError
    │   └── EncodeError
    └── TemplateError
        ├── TemplateParseError
        └── TemplateRenderError
"""


class PicGalleryError(Exception):
    """Base exception for all gallery generator errors."""

    pass


class ConfigurationError(PicGalleryError):
    """Raised when required settings are missing or invalid."""

    pass


class GenerationCancelled(PicGalleryError):
    """Raised when a run is cancelled through its cancellation token."""

    pass


# --- Storage ---
class StorageError(PicGalleryError):
    """Base exception for failures against a storage backend.

    Attributes:
        path: Storage path (or listing prefix) the operation targeted.
    """

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class ListingError(StorageError):
    """Raised when a container (directory or key prefix) cannot be enumerated."""

    pass


class StorageReadError(StorageError):
    """Raised when a file cannot be opened or read from the backend."""

    pass


class StorageWriteError(StorageError):
    """Raised when a file cannot be created, written or committed."""

    pass


# --- Images ---
class ImageError(PicGalleryError):
    """Base exception for image decoding and encoding failures."""

    pass


class DecodeError(ImageError):
    """Raised when an original picture cannot be decoded."""

    pass


class EncodeError(ImageError):
    """Raised when a resized picture cannot be encoded.

    Also raised when the output format cannot be inferred from the picture's
    filename extension.
    """

    pass


# --- Templates ---
class TemplateError(PicGalleryError):
    """Base exception for page template failures."""

    pass


class TemplateParseError(TemplateError):
    """Raised when a bundled page template is malformed."""

    pass


class TemplateRenderError(TemplateError):
    """Raised when rendering fails, e.g. because the context lacks a name."""

    pass
