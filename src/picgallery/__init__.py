"""picgallery - Static photo gallery generator for local and object storage."""

__version__ = "0.1.0"

from picgallery.backends import BackendBase, LocalBackend, S3Backend, create_backend
from picgallery.core import Album, GalleryConfig, Generator

__all__ = [
    "Album",
    "BackendBase",
    "GalleryConfig",
    "Generator",
    "LocalBackend",
    "S3Backend",
    "create_backend",
]
