"""Bundled website template: page templates and static assets.

The package ships a ``site_template`` directory with two bundles::

    site_template/
    ├── homepage/
    │   ├── index.html      homepage template
    │   └── assets/...      copied to assets/homepage/
    └── album/
        ├── index.html      album page template
        └── assets/...      copied to assets/album/

:func:`load_site_template` reads the whole tree into memory once per process
and returns the same immutable :class:`SiteTemplate` on every call, so a run
never goes back to the package data after startup.

Page templates are Jinja2 templates rendered with autoescaping and
``StrictUndefined``: a template that refers to a name the context does not
provide fails instead of silently rendering an empty string.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import jinja2

from .exceptions import TemplateParseError, TemplateRenderError

logger = logging.getLogger(__name__)

SITE_TEMPLATE_DIR = Path(__file__).resolve().parents[1] / "site_template"

BUNDLES = ("homepage", "album")
PAGE_NAME = "index.html"
ASSETS_DIR = "assets"

_jinja_env = jinja2.Environment(
    autoescape=True,
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
)


class PageTemplate:
    """A parsed page template."""

    def __init__(self, name: str, source: str) -> None:
        self.name = name
        try:
            self._template = _jinja_env.from_string(source)
        except jinja2.TemplateSyntaxError as e:
            raise TemplateParseError(
                f"Failed to parse {name} template (line {e.lineno}): {e.message}"
            ) from e

    def render(self, context: Mapping[str, Any]) -> str:
        """Render the template with ``context``.

        Raises:
            TemplateRenderError: If rendering fails, e.g. on an undefined name.
        """
        try:
            return self._template.render(context)
        except (jinja2.TemplateError, TypeError, AttributeError) as e:
            raise TemplateRenderError(f"Failed to render {self.name} template: {e}") from e


@dataclass(frozen=True)
class SiteTemplate:
    """In-memory copy of the bundled site template.

    Attributes:
        pages: Template source per bundle name.
        assets: Static asset files per bundle name, as ``(relative path, content)``
            pairs in directory pre-order.
    """

    pages: Mapping[str, str]
    assets: Mapping[str, tuple[tuple[str, bytes], ...]]

    @classmethod
    def from_directory(cls, root: Path) -> SiteTemplate:
        """Read a site template tree from disk.

        Raises:
            OSError: If a bundle page is missing or a file cannot be read.
        """
        pages = {}
        assets = {}
        for bundle in BUNDLES:
            bundle_dir = root / bundle
            pages[bundle] = (bundle_dir / PAGE_NAME).read_text(encoding="utf-8")

            assets_dir = bundle_dir / ASSETS_DIR
            files = tuple(_walk(assets_dir, "")) if assets_dir.is_dir() else ()
            assets[bundle] = files
            logger.debug(f"Loaded {bundle} template with {len(files)} asset files")

        return cls(pages=MappingProxyType(pages), assets=MappingProxyType(assets))

    def page_source(self, bundle: str) -> str:
        return self.pages[bundle]

    def asset_files(self, bundle: str) -> tuple[tuple[str, bytes], ...]:
        return self.assets[bundle]

    def parse_page(self, bundle: str) -> PageTemplate:
        """Parse the page template of a bundle.

        Raises:
            TemplateParseError: If the template is malformed.
        """
        return PageTemplate(bundle, self.page_source(bundle))


def _walk(directory: Path, prefix: str):
    """Yield ``(relative path, content)`` for files below ``directory`` in pre-order."""
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        relative = f"{prefix}{entry.name}"
        if entry.is_dir():
            yield from _walk(entry, relative + "/")
        else:
            yield relative, entry.read_bytes()


@lru_cache(maxsize=1)
def load_site_template() -> SiteTemplate:
    """Return the bundled site template, loading it on first use."""
    logger.info(f"Loading site template from {SITE_TEMPLATE_DIR}")
    return SiteTemplate.from_directory(SITE_TEMPLATE_DIR)
