"""Layout resolution for Quire pages."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import PurePosixPath
from typing import TYPE_CHECKING, Any

from .protocols import FOLDER_LAYOUTS, LAYOUTS, TemplateEngine

if TYPE_CHECKING:
    from .content import Page


class LayoutResolver:
    """Resolves the layout name for a page.

    Searches in order:
    1. ``layout`` in the page's front matter
    2. ``page_layouts`` entry for the page's folder, then each ancestor folder
       (only when the engine supports per-folder layouts)
    3. the project default layout

    Attributes:
        default_layout: Layout used when nothing more specific applies.
        page_layouts: Mapping of folder (relative to the pages root) to layout.
    """

    def __init__(self, options: Mapping[str, Any]):
        self.default_layout = options.get("default_layout") or "default"
        self.page_layouts = {
            str(folder).strip("/"): layout
            for folder, layout in (options.get("page_layouts") or {}).items()
        }

    def resolve(
        self, page: Page, front_matter: Mapping[str, Any], engine: TemplateEngine
    ) -> str | None:
        """Resolve the layout for a page.

        Args:
            page: Page being rendered.
            front_matter: The page's front matter.
            engine: Active templating engine.

        Returns:
            Layout name, or None if the engine does not support layouts.
        """
        if not engine.supports(LAYOUTS):
            return None
        explicit = front_matter.get("layout")
        if explicit:
            return str(explicit)
        if engine.supports(FOLDER_LAYOUTS) and page.folder:
            for folder in self._folder_candidates(page.folder):
                if folder in self.page_layouts:
                    return str(self.page_layouts[folder])
        return self.default_layout

    @staticmethod
    def _folder_candidates(folder: str) -> list[str]:
        path = PurePosixPath(folder)
        return [path.as_posix()] + [
            p.as_posix() for p in path.parents if p != PurePosixPath(".")
        ]
