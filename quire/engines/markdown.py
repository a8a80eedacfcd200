"""Markdown engine for Quire.

Pages are Markdown documents. ``${name}`` and dotted ``${site.title}``
placeholders are filled from the page data before the Markdown is converted
to HTML with mistune. Layouts are HTML files in ``layouts/`` with a
``${body}`` placeholder. Unknown placeholders are left as written.
"""

from __future__ import annotations

import html
from collections.abc import Mapping
from pathlib import Path
from string import Template
from typing import Any

import mistune

from ..config import folder_path
from ..data import Collection
from ..errors import PageRenderError
from ..protocols import LAYOUTS
from ..utils import lookup

LAYOUT_SUFFIXES = (".html", ".htm", "")


class _PageTemplate(Template):
    idpattern = r"(?a:[_a-z][_a-z0-9]*(?:\.[_a-z0-9]+)*)"


class _DataLookup(Mapping[str, str]):
    """Read-only view of page data resolving dotted keys to strings.

    Callables (helpers) and missing keys are treated as absent so the
    placeholder stays in the output.
    """

    def __init__(self, data: Mapping[str, Any]):
        self._data = data

    def __getitem__(self, key: str) -> str:
        value = lookup(self._data, key)
        if callable(value) or value is None:
            raise KeyError(key)
        return str(value)

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


class MarkdownEngine:
    """Renders Markdown pages with placeholder substitution.

    Attributes:
        options: Site options.
        layouts_dir: Directory containing layout files.
    """

    name = "markdown"
    requires = "mistune"
    capabilities = frozenset({LAYOUTS})

    def __init__(self, options: Mapping[str, Any]):
        self.options = options
        self.layouts_dir = folder_path(options, "layouts")
        self._markdown = mistune.create_markdown(
            escape=False, plugins=["strikethrough", "footnotes", "table", "url"]
        )
        self._layouts: dict[str, _PageTemplate] = {}
        self._compiled: dict[str, _PageTemplate] = {}

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    async def setup(self) -> None:
        self._layouts = {}
        self._compiled = {}

    def _compile(self, source: str) -> _PageTemplate:
        template = self._compiled.get(source)
        if template is None:
            template = _PageTemplate(source)
            self._compiled[source] = template
        return template

    def build_collections(self, collections: Mapping[str, Collection]) -> None:
        for collection in collections.values():
            self._compile(collection.template)

    def _layout(self, name: str) -> _PageTemplate:
        """Load a layout by name.

        Raises:
            FileNotFoundError: If no layout file exists for ``name``.
        """
        if name not in self._layouts:
            for suffix in LAYOUT_SUFFIXES:
                path: Path = self.layouts_dir / f"{name}{suffix}"
                if path.is_file():
                    self._layouts[name] = _PageTemplate(path.read_text(encoding="utf-8"))
                    break
            else:
                raise FileNotFoundError(f"Layout not found: {name}")
        return self._layouts[name]

    def render(self, source: str, data: dict[str, Any]) -> str:
        lookup_data = _DataLookup(data)
        body = self._markdown(self._compile(source).safe_substitute(lookup_data))
        layout = data.get("layout")
        if not layout:
            return body
        return self._layout(str(layout)).safe_substitute(
            _DataLookup({**data, "body": body})
        )

    def render_error(self, error: PageRenderError, data: dict[str, Any]) -> str:
        page = html.escape(str(data.get("page", "")))
        return (
            "<!doctype html>\n<html>\n<head><meta charset=\"utf-8\">"
            f"<title>Error in {page}</title></head>\n<body>\n"
            "<h1>Quire could not render this page</h1>\n"
            f"<p><strong>Page:</strong> <code>{html.escape(str(error.source_path))}</code></p>\n"
            f"<pre>{html.escape(error.message)}</pre>\n</body>\n</html>\n"
        )
