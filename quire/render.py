"""Rendering orchestration for Quire.

Renders every page of a build pass through the active engine. A page that
fails to render never stops the batch: its error is attached to the page
data and the engine renders an error report for it instead.

Key classes:
- RenderedPage: One rendered page, with its error if it failed.
- BuildResult: Ordered rendered pages plus page and error counts.
- RenderOrchestrator: Renders a list of pages concurrently.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field, replace
from pathlib import PurePosixPath
from typing import Any, Union

from .assembly import PageDataAssembler
from .content import Page
from .data import SiteSnapshot
from .errors import ConfigurationError, PageRenderError
from .protocols import OutputSink, TemplateEngine

Transform = Callable[[str], Union[str, Awaitable[str]]]


@dataclass
class RenderedPage:
    """Result of rendering one page.

    Attributes:
        page: The page that was rendered.
        path: Output path relative to the destination folder.
        contents: Rendered HTML (an error report if rendering failed).
        error: The captured render error, if any.
    """

    page: Page
    path: str
    contents: str
    error: PageRenderError | None = None


@dataclass
class BuildResult:
    """Result of rendering a build pass.

    Attributes:
        pages: Rendered pages in discovery order.
    """

    pages: list[RenderedPage] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def error_count(self) -> int:
        return sum(1 for p in self.pages if p.error is not None)

    @property
    def errors(self) -> list[PageRenderError]:
        return [p.error for p in self.pages if p.error is not None]


class RenderOrchestrator:
    """Renders pages through the engine with per-page error isolation.

    Attributes:
        engine: Active templating engine.
        snapshot: Snapshot every page of this pass reads from.
        assembler: Page data assembler.
    """

    def __init__(
        self,
        engine: TemplateEngine,
        snapshot: SiteSnapshot,
        assembler: PageDataAssembler,
    ):
        self.engine = engine
        self.snapshot = snapshot
        self.assembler = assembler

    async def render(self, pages: Iterable[Page]) -> BuildResult:
        """Render all pages.

        Pages are rendered concurrently; the result keeps their input order.
        """
        rendered = await asyncio.gather(*(self.render_page(p) for p in pages))
        return BuildResult(list(rendered))

    async def render_page(self, page: Page) -> RenderedPage:
        """Render one page, converting any failure into an error report."""
        if page.error is not None:
            error = PageRenderError.from_exception(page.path, page.error)
            return self._render_error(page, error)
        try:
            data = self.assembler.page_data(page, self.snapshot)
            contents = self.engine.render(page.source, data)
            if inspect.isawaitable(contents):
                contents = await contents
        except Exception as exc:
            error = PageRenderError.from_exception(page.path, exc)
            return self._render_error(page, error)
        return RenderedPage(page=page, path=page.output_path, contents=contents)

    def _render_error(self, page: Page, error: PageRenderError) -> RenderedPage:
        data = self.assembler.page_data(page, self.snapshot, error=error)
        return RenderedPage(
            page=page,
            path=page.output_path,
            contents=self.engine.render_error(error, data),
            error=error,
        )


def resolve_transforms(transform: Mapping[str, Any] | None) -> dict[str, list[Transform]]:
    """Normalise the transform option to lists of callables per extension.

    Args:
        transform: Mapping of output extension (".html") to a callable or a
            list of callables.

    Returns:
        Mapping of lower-cased extension to callables, in application order.

    Raises:
        ConfigurationError: If the option is not a mapping or holds
            something that is not callable.
    """
    if not transform:
        return {}
    if not isinstance(transform, Mapping):
        raise ConfigurationError("The transform option must map extensions to callables.")
    resolved: dict[str, list[Transform]] = {}
    for ext, funcs in transform.items():
        funcs = list(funcs) if isinstance(funcs, (list, tuple)) else [funcs]
        for func in funcs:
            if not callable(func):
                raise ConfigurationError(f'Transform for "{ext}" is not callable: {func!r}')
        key = ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        resolved[key] = funcs
    return resolved


async def apply_transforms(
    rendered: RenderedPage, transforms: Mapping[str, list[Transform]]
) -> RenderedPage:
    """Run the transforms registered for a page's output extension."""
    funcs = transforms.get(PurePosixPath(rendered.path).suffix.lower())
    if not funcs:
        return rendered
    contents = rendered.contents
    for func in funcs:
        contents = func(contents)
        if inspect.isawaitable(contents):
            contents = await contents
    return replace(rendered, contents=contents)


async def build_pages(
    result: BuildResult,
    sink: OutputSink,
    transforms: Mapping[str, list[Transform]] | None = None,
) -> BuildResult:
    """Hand every rendered page to an output sink, in result order.

    Args:
        result: Rendered build pass.
        sink: Callable receiving each RenderedPage; awaited if it returns an awaitable.
        transforms: Resolved transforms, applied to each page before the sink.

    Returns:
        The same BuildResult, holding the transformed pages.
    """
    for index, rendered in enumerate(result.pages):
        if transforms:
            rendered = await apply_transforms(rendered, transforms)
            result.pages[index] = rendered
        outcome = sink(rendered)
        if inspect.isawaitable(outcome):
            await outcome
    return result
