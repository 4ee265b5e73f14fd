"""Command line interface.

Usage::

    picgallery generate --root-dir /srv/gallery
    picgallery generate --backend s3 --bucket my-gallery \\
        --access-key-id ... --secret-access-key ...

Options given on the command line override ``PICGALLERY_*`` environment
variables and the ``.env`` file.  Any error is logged with its traceback and
the process exits with status 1.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from picgallery import __version__
from picgallery.backends import create_backend
from picgallery.core.config import GalleryConfig
from picgallery.core.exceptions import ConfigurationError, PicGalleryError
from picgallery.core.generator import Generator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# argparse destinations that map onto GalleryConfig fields
_CONFIG_OPTIONS = (
    "backend",
    "root_dir",
    "bucket",
    "access_key_id",
    "secret_access_key",
    "endpoint_url",
    "region",
    "title",
    "log_level",
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="picgallery",
        description="Photo gallery generator for local directories and S3-compatible storage",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate", help="generate the photo gallery website from scratch"
    )
    generate.add_argument("--backend", choices=["local", "s3"], help="storage backend")
    generate.add_argument("--root-dir", dest="root_dir", help="root directory (local backend)")
    generate.add_argument("--bucket", help="bucket holding the gallery (s3 backend)")
    generate.add_argument("--access-key-id", dest="access_key_id", help="access key ID (s3 backend)")
    generate.add_argument(
        "--secret-access-key", dest="secret_access_key", help="secret access key (s3 backend)"
    )
    generate.add_argument("--endpoint-url", dest="endpoint_url", help="S3-compatible endpoint URL")
    generate.add_argument("--region", help="region name (s3 backend)")
    generate.add_argument("--title", help="homepage title")
    generate.add_argument(
        "--log-level",
        dest="log_level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="logging level",
    )
    return parser


def load_config(args: argparse.Namespace) -> GalleryConfig:
    """Build the configuration from parsed arguments and the environment.

    Raises:
        ConfigurationError: If a setting is invalid.
    """
    overrides = {
        name: getattr(args, name)
        for name in _CONFIG_OPTIONS
        if getattr(args, name, None) is not None
    }
    try:
        return GalleryConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def generate(config: GalleryConfig) -> None:
    backend = create_backend(config)
    report = Generator(backend, title=config.title).generate()
    logger.info(
        f"Done: {report.albums} albums, {report.pictures} pictures, "
        f"{report.pages} pages, {report.assets} asset files"
    )


def main(argv: list[str] | None = None) -> int:
    """Run the command line interface.

    Returns:
        Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except ConfigurationError:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.exception("Configuration error")
        return 1

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format=LOG_FORMAT,
    )

    try:
        generate(config)
    except PicGalleryError:
        logger.exception("Gallery generation failed")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
