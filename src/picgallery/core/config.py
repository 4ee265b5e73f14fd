"""Configuration management for the gallery generator.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PICGALLERY_ prefix,
allowing the same command to target different storage without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Keyword arguments (the CLI passes its options this way)
2. Environment variables (PICGALLERY_* prefix)
3. .env file in the working directory
4. Default values defined in GalleryConfig

Example .env file:
    PICGALLERY_BACKEND=s3
    PICGALLERY_BUCKET=my-gallery
    PICGALLERY_ACCESS_KEY_ID=jw7...
    PICGALLERY_SECRET_ACCESS_KEY=j3h...
    PICGALLERY_ENDPOINT_URL=https://gateway.storjshare.io

Backends
--------
- ``local``: the site is read from and written to ``root_dir``.
- ``s3``: the site lives in ``bucket`` on an S3-compatible object store.
  The access key pair is the access credential; the bucket is the container.
  Both are required and checked by :meth:`GalleryConfig.require_remote`
  before any pipeline step runs.

Usage Example
-------------
    from picgallery.core.config import GalleryConfig

    config = GalleryConfig(root_dir="/srv/gallery")
    print(config.backend, config.root_dir)

See Also
--------
- picgallery.backends.create_backend: builds the configured backend
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

DEFAULT_TITLE = "Photo gallery"


class GalleryConfig(BaseSettings):
    """Main configuration for the gallery generator.

    Attributes
    ----------
    backend : Literal["local", "s3"]
        Storage variant the site is generated against.
    root_dir : Path
        Root directory of the local variant.
    bucket : str | None
        Bucket (container) of the remote variant.
    access_key_id : str | None
        Access key ID of the remote variant.
    secret_access_key : SecretStr | None
        Secret access key of the remote variant.
    endpoint_url : str
        Endpoint of the S3-compatible gateway.
    region : str | None
        Optional region name passed to the S3 client.
    title : str
        Homepage title.
    log_level : str
        Logging level used by the CLI.

    Notes
    -----
    Unlike directory-oriented settings elsewhere, ``root_dir`` is not created
    on initialisation: a missing root is reported as a listing error when the
    pipeline enumerates albums.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PICGALLERY_",
        case_sensitive=False,
        extra="ignore",
    )

    backend: Literal["local", "s3"] = Field(
        default="local",
        description="Storage backend to generate the gallery against",
    )

    # Local variant
    root_dir: Path = Field(
        default=Path("site"),
        description="Root directory of the local gallery",
    )

    # Remote variant
    bucket: str | None = Field(
        default=None,
        description="Bucket holding the gallery on the object store",
    )
    access_key_id: str | None = Field(
        default=None,
        description="Access key ID for the object store",
    )
    secret_access_key: SecretStr | None = Field(
        default=None,
        description="Secret access key for the object store",
    )
    endpoint_url: str = Field(
        default="https://gateway.storjshare.io",
        description="S3-compatible gateway endpoint",
    )
    region: str | None = Field(
        default=None,
        description="Region name for the S3 client (optional)",
    )

    # Site
    title: str = Field(
        default=DEFAULT_TITLE,
        min_length=1,
        description="Title rendered on the homepage",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    def require_remote(self) -> None:
        """Check that every setting the remote variant needs is present.

        Raises:
            ConfigurationError: Naming all missing settings at once.
        """
        missing = []
        if not self.bucket:
            missing.append("bucket")
        if not self.access_key_id:
            missing.append("access_key_id")
        if self.secret_access_key is None or not self.secret_access_key.get_secret_value():
            missing.append("secret_access_key")

        if missing:
            raise ConfigurationError(
                f"Missing required settings for the s3 backend: {', '.join(missing)}"
            )
