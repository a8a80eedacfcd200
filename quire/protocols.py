"""Protocol definitions for Quire.

Templating engines are described by what they can do rather than by name.
Call sites ask ``engine.supports("layouts")`` instead of comparing engine
identifiers, so a new engine only has to declare its capabilities.

Known capabilities:
- layouts: the engine wraps pages in layout templates.
- folder_layouts: the engine honours the per-folder ``page_layouts`` option.
- i18n: the engine can use a ``translate`` helper.
- native_helpers: the engine ships its own helper library (filters, tests)
  and only needs the loop helper injected.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Awaitable, Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .data import Collection
    from .errors import PageRenderError
    from .render import RenderedPage

LAYOUTS = "layouts"
FOLDER_LAYOUTS = "folder_layouts"
I18N = "i18n"
NATIVE_HELPERS = "native_helpers"

# Receives every rendered page; may return an awaitable
OutputSink = Callable[["RenderedPage"], "Awaitable[Any] | None"]


@runtime_checkable
class TemplateEngine(Protocol):
    """Protocol for templating engines.

    Implementations render a page template source with a page data object.
    """

    name: str
    requires: str
    capabilities: frozenset[str]

    @abstractmethod
    def supports(self, capability: str) -> bool:
        """Check if this engine declares the given capability."""
        ...

    @abstractmethod
    async def setup(self) -> None:
        """Reset caches and reload engine-level resources (layouts, partials)."""
        ...

    @abstractmethod
    def render(self, source: str, data: dict[str, Any]) -> str | Awaitable[str]:
        """Render a page template.

        Args:
            source: Page template source, front matter removed.
            data: Assembled page data object.

        Returns:
            Rendered HTML, or an awaitable resolving to it.
        """
        ...

    @abstractmethod
    def render_error(self, error: PageRenderError, data: dict[str, Any]) -> str:
        """Render a human-readable error report for a failed page."""
        ...

    @abstractmethod
    def build_collections(self, collections: Mapping[str, Collection]) -> None:
        """Pre-compile or index collection templates once they are all loaded."""
        ...
