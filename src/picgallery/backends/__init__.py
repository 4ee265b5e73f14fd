"""Storage backends for the gallery generator.

Importing this package registers both variants with :data:`backend_registry`.
"""

from picgallery.core.config import GalleryConfig

from .base import BackendBase, BackendRegistry, StorageWriter, backend_registry
from .local import LocalBackend
from .s3 import S3Backend


def create_backend(config: GalleryConfig) -> BackendBase:
    """Instantiate the backend selected by ``config.backend``."""
    return backend_registry.instantiate(config.backend, config)


__all__ = [
    "BackendBase",
    "BackendRegistry",
    "StorageWriter",
    "backend_registry",
    "create_backend",
    "LocalBackend",
    "S3Backend",
]
