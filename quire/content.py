"""Page discovery for Quire.

This module finds page templates under the pages folder, splits off their
front matter, and assigns locales. Collections are expanded into virtual
pages so the render step treats them like any other page.

Key classes:
- Page: Dataclass representing one page to render.
- PageLoader: Discovers pages under the pages folder.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import folder_path
from .data import Collection
from .extractors import extract_frontmatter
from .locales import LocaleTable
from .utils import output_path, page_name, read_text


@dataclass
class Page:
    """Represents a page template to render.

    Attributes:
        path: Path to the source file (virtual for collection pages).
        rel: Path relative to the pages root.
        source: Template source with front matter removed.
        front_matter: Parsed front matter.
        attributes: File-level attributes attached by an upstream loader.
        locale: Assigned locale, if any.
        error: Front matter parse error, if any.
        collection: Name of the collection this page was generated from.
    """

    path: Path
    rel: Path
    source: str
    front_matter: dict[str, Any] = field(default_factory=dict)
    attributes: dict[str, Any] = field(default_factory=dict)
    locale: str | None = None
    error: Exception | None = None
    collection: str | None = None

    @property
    def name(self) -> str:
        return page_name(self.path)

    @property
    def folder(self) -> str:
        """Containing folder relative to the pages root, "" at top level."""
        parent = self.rel.parent
        return "" if parent == Path(".") else parent.as_posix()

    @property
    def output_path(self) -> str:
        return output_path(self.rel)


class PageLoader:
    """Discovers pages under the pages folder.

    Attributes:
        pages_dir: Root of the pages area.
        locales: Loaded locale table, used to recognise locale folders.
        default_locale: Locale for pages outside any locale folder.
    """

    def __init__(self, options: Mapping[str, Any], locales: LocaleTable | None = None):
        self.pages_dir = folder_path(options, "pages")
        self.locales = locales or LocaleTable()
        self.default_locale = options.get("default_locale")

    def iter_files(self) -> list[Path]:
        """Return every page file, sorted by path, skipping dotfiles."""
        if not self.pages_dir.is_dir():
            return []
        files: list[Path] = []
        for path in sorted(self.pages_dir.rglob("*")):
            if path.is_dir():
                continue
            rel = path.relative_to(self.pages_dir)
            if any(part.startswith(".") for part in rel.parts):
                continue
            files.append(path)
        return files

    async def load(self) -> list[Page]:
        """Load every page in discovery order."""
        paths = self.iter_files()
        return list(await asyncio.gather(*(self.load_page(p) for p in paths)))

    async def load_page(self, path: Path) -> Page:
        """Read a page file and split off its front matter.

        A file that is not valid UTF-8 or has broken front matter does not
        raise; the error is kept on the page so it can be reported in the
        rendered output.
        """
        rel = path.relative_to(self.pages_dir)
        try:
            raw = await read_text(path)
        except UnicodeDecodeError as exc:
            return Page(path=path, rel=rel, source="", locale=self.locale_for(rel), error=exc)
        error: Exception | None = None
        try:
            front_matter, source = extract_frontmatter(raw)
        except yaml.YAMLError as exc:
            front_matter, source, error = {}, raw, exc
        return Page(
            path=path,
            rel=rel,
            source=source,
            front_matter=front_matter,
            locale=self.locale_for(rel),
            error=error,
        )

    def locale_for(self, rel: Path) -> str | None:
        """Return the locale of a page from its first folder, or the default."""
        if len(rel.parts) > 1 and rel.parts[0] in self.locales:
            return rel.parts[0]
        return self.default_locale

    def collection_pages(self, collections: Iterable[Collection]) -> list[Page]:
        """Expand collections into one virtual page per entry.

        Each entry becomes the page's front matter, with a ``collection`` key
        naming its collection and the collection's ``layout`` applied when
        the entry has none. Entries without a slug are numbered. A slug that
        is not a plain file name is numbered too and the page carries an
        error, so it is reported instead of written outside its folder.
        """
        pages: list[Page] = []
        for collection in collections:
            for index, entry in enumerate(collection.entries):
                slug = str(entry.get(collection.slug_key) or index)
                error: Exception | None = None
                if not is_safe_slug(slug):
                    error = ValueError(f'Invalid slug "{slug}" in collection "{collection.name}"')
                    slug = str(index)
                rel = Path(collection.output) / f"{slug}.html"
                front_matter = dict(entry)
                front_matter.setdefault("collection", collection.name)
                if "layout" in collection.metadata:
                    front_matter.setdefault("layout", collection.metadata["layout"])
                pages.append(
                    Page(
                        path=self.pages_dir / rel,
                        rel=rel,
                        source=collection.template,
                        front_matter=front_matter,
                        locale=self.locale_for(rel),
                        error=error,
                        collection=collection.name,
                    )
                )
        return pages


def is_safe_slug(slug: str) -> bool:
    """Check that a collection slug is a single file name within its folder."""
    if not slug or slug.startswith("."):
        return False
    return "/" not in slug and "\\" not in slug
