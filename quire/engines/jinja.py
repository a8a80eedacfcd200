"""Jinja2 engine for Quire.

Pages are Jinja templates. Layouts live in ``layouts/`` and receive the
rendered page as ``body``; partials in ``partials/`` are available to
``{% include %}``. When builtins are enabled the ``markdown``, ``code`` and
``slug`` filters are registered on the environment.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape
from markupsafe import Markup

from ..config import folder_path
from ..data import Collection
from ..errors import PageRenderError
from ..helpers import code, markdown, slug
from ..protocols import FOLDER_LAYOUTS, I18N, LAYOUTS, NATIVE_HELPERS

ERROR_TEMPLATE = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>Error in {{ page }}</title></head>
<body>
<h1>Quire could not render this page</h1>
<p><strong>Page:</strong> <code>{{ source }}</code></p>
<pre>{{ message }}</pre>
</body>
</html>
"""


class JinjaEngine:
    """Template rendering engine using Jinja2.

    Attributes:
        options: Site options.
        env: Jinja2 environment.
    """

    name = "jinja"
    requires = "jinja2"
    capabilities = frozenset({LAYOUTS, FOLDER_LAYOUTS, I18N, NATIVE_HELPERS})

    def __init__(self, options: Mapping[str, Any]):
        self.options = options
        self.env = self._create_environment()
        self._compiled: dict[str, Template] = {}
        self._error_template = self.env.from_string(ERROR_TEMPLATE)

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    def _create_environment(self) -> Environment:
        env = Environment(
            loader=FileSystemLoader(
                [
                    folder_path(self.options, "layouts"),
                    folder_path(self.options, "partials"),
                ]
            ),
            autoescape=select_autoescape(["html", "xml"]),
            enable_async=False,
        )
        if self.options.get("builtins", True):
            env.filters["markdown"] = markdown
            env.filters["code"] = code
            env.filters["slug"] = slug
        return env

    async def setup(self) -> None:
        """Start from a fresh environment so edited layouts and partials reload."""
        self.env = self._create_environment()
        self._compiled = {}
        self._error_template = self.env.from_string(ERROR_TEMPLATE)

    def _compile(self, source: str) -> Template:
        template = self._compiled.get(source)
        if template is None:
            template = self.env.from_string(source)
            self._compiled[source] = template
        return template

    def build_collections(self, collections: Mapping[str, Collection]) -> None:
        for collection in collections.values():
            self._compile(collection.template)

    def _resolve_layout_template(self, layout: str) -> Template:
        """Find a layout template by name.

        Raises:
            jinja2.TemplatesNotFound: If no candidate file exists.
        """
        return self.env.select_template(
            [
                f"{layout}.html.jinja",
                f"{layout}.jinja",
                f"{layout}.html",
                layout,
            ]
        )

    def render(self, source: str, data: dict[str, Any]) -> str:
        """Render a page and wrap it in its layout.

        Args:
            source: Page template source.
            data: Page data object.

        Returns:
            Rendered HTML string.
        """
        body = self._compile(source).render(data)
        layout = data.get("layout")
        if not layout:
            return body
        layout_template = self._resolve_layout_template(str(layout))
        return layout_template.render({**data, "body": Markup(body)})

    def render_error(self, error: PageRenderError, data: dict[str, Any]) -> str:
        return self._error_template.render(
            page=data.get("page", ""),
            source=str(error.source_path),
            message=error.message,
        )
