"""Core functionality for gallery generation.

This module provides the core components of the gallery generator:

- **GalleryConfig**: Configuration management using Pydantic Settings
- **Album**: The gallery data model
- **Generator**: The pipeline that resizes pictures and renders pages
- **Exceptions**: The error hierarchy every component raises

Architecture Overview
---------------------
1. **Configuration Layer** (config.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with PICGALLERY_ in .env files

2. **Storage Layer** (picgallery.backends):
   - Local filesystem and S3-compatible object store behind one interface
   - Shared listing rules: hidden names skipped, results sorted

3. **Pipeline Layer** (generator.py, resize.py, site_template.py):
   - Pillow-based resizing into two size classes
   - Jinja2 page templates and static assets bundled with the package

Usage Example
-------------
    from picgallery.backends import create_backend
    from picgallery.core import GalleryConfig, Generator

    config = GalleryConfig(root_dir="/srv/gallery")
    Generator(create_backend(config), title=config.title).generate()
"""

from picgallery.core.config import GalleryConfig
from picgallery.core.exceptions import PicGalleryError
from picgallery.core.generator import CancellationToken, GenerationReport, Generator
from picgallery.core.models import Album

__all__ = [
    "Album",
    "CancellationToken",
    "GalleryConfig",
    "GenerationReport",
    "Generator",
    "PicGalleryError",
]
