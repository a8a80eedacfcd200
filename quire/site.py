"""Build coordination for Quire.

The Site class owns the setup/readiness lifecycle and drives a build pass:

    CONFIGURED --setup()--> NOT_READY --(loads done)--> READY
    READY --setup()--> NOT_READY --(loads done)--> READY

``compile()`` and ``compile_stream()`` wait for READY before rendering. The
ready signal is re-armed on every ``setup_start`` so a compile issued during
a refresh waits for the new data, not for a signal that already fired.

Lifecycle events: setup_start, setup_done, refreshing, parsing, building,
built(page_count, error_count), error(err).
"""

from __future__ import annotations

import asyncio
import contextlib
import enum
from collections.abc import AsyncIterator, Mapping
from pathlib import Path
from typing import Any

from .assembly import PageDataAssembler
from .config import load_config
from .content import Page, PageLoader
from .data import SiteSnapshot, build_snapshot
from .engines import create_engine
from .errors import ConfigurationError, QuireError, SetupError
from .events import EventEmitter
from .protocols import OutputSink
from .render import (
    BuildResult,
    RenderedPage,
    RenderOrchestrator,
    build_pages,
    resolve_transforms,
)


class SiteState(enum.Enum):
    CONFIGURED = "configured"
    NOT_READY = "not_ready"
    READY = "ready"


class Site(EventEmitter):
    """Core Quire class.

    Stores options, the templating engine and the current setup snapshot,
    and turns pages into rendered output.

    Attributes:
        options: Resolved site options.
        engine: Active templating engine.
        state: Current lifecycle state.
        snapshot: Snapshot produced by the last successful setup, if any.
    """

    def __init__(self, input_dir: Path | str | None, options: Mapping[str, Any] | None = None):
        """Validate the input folder and engine.

        Args:
            input_dir: Root project folder.
            options: Explicit options, overriding quire.yaml and the defaults.

        Raises:
            ConfigurationError: If the input folder is missing, the engine is
                unknown or not installed, or a transform is not callable.
        """
        super().__init__()
        if not input_dir:
            raise ConfigurationError("An input folder must be set.")
        root = Path(input_dir)
        if not root.is_dir():
            raise ConfigurationError(f"Input folder does not exist: {root}")

        self.options = load_config(root, options)
        self.engine = create_engine(self.options)
        self.transforms = resolve_transforms(self.options.get("transform"))
        self.state = SiteState.CONFIGURED
        self.snapshot: SiteSnapshot | None = None
        self._generation = 0
        self._ready = asyncio.Event()
        self._setup_error: SetupError | None = None

        if not self.options.get("quiet"):
            from .reporter import ProgressReporter

            ProgressReporter(self)

    @property
    def ready(self) -> bool:
        return self.state is SiteState.READY

    async def setup(self) -> SiteSnapshot:
        """Load data, locales and collections into a new snapshot.

        Returns:
            The new snapshot.

        Raises:
            SetupError: If any load fails. No pages are rendered for this pass.
        """
        self._generation += 1
        generation = self._generation
        self.state = SiteState.NOT_READY
        previous, self._ready = self._ready, asyncio.Event()
        ready = self._ready
        # Wake anyone waiting on the old signal so they re-wait on the new one
        previous.set()
        self._setup_error = None
        self.emit("setup_start")

        try:
            snapshot = await build_snapshot(self.options, self.engine, generation)
        except SetupError as exc:
            if generation == self._generation:
                self._setup_error = exc
                ready.set()
            self.emit("error", exc)
            raise

        # A newer setup started while this one was loading; its result wins
        if generation == self._generation:
            self.snapshot = snapshot
            self.state = SiteState.READY
            ready.set()
            self.emit("setup_done")
        return snapshot

    async def when_ready(self) -> SiteSnapshot:
        """Wait until the current setup has finished.

        Returns:
            The snapshot to build from.

        Raises:
            SetupError: If the current setup failed.
        """
        while True:
            if self.state is SiteState.READY and self.snapshot is not None:
                return self.snapshot
            ready = self._ready
            await ready.wait()
            if ready is self._ready and self._setup_error is not None:
                raise self._setup_error

    async def load_pages(self, snapshot: SiteSnapshot) -> list[Page]:
        """Discover the pages of a build pass, collection pages last."""
        loader = PageLoader(self.options, snapshot.locales)
        pages = await loader.load()
        return pages + loader.collection_pages(snapshot.collections.values())

    async def render(
        self, snapshot: SiteSnapshot, pages: list[Page] | None = None
    ) -> BuildResult:
        """Render pages against one snapshot.

        Args:
            snapshot: Snapshot every page reads from.
            pages: Pages to render; discovered from the project when omitted.
        """
        if pages is None:
            pages = await self.load_pages(snapshot)
        self.emit("building")
        assembler = PageDataAssembler(self.engine, self.options)
        return await RenderOrchestrator(self.engine, snapshot, assembler).render(pages)

    async def _build(self, sink: OutputSink) -> BuildResult:
        self.emit("refreshing")
        snapshot = await self.when_ready()
        try:
            self.emit("parsing")
            result = await self.render(snapshot)
            await build_pages(result, sink, self.transforms)
        except Exception as exc:
            self.emit("error", exc)
            raise
        self.emit("built", result.page_count, result.error_count)
        return result

    async def compile(self, dest: Path | str) -> BuildResult:
        """Compile the site and write it to disk.

        Args:
            dest: Folder to write final pages to.

        Returns:
            The BuildResult of this pass.
        """
        dest_dir = Path(dest)

        async def write(page: RenderedPage) -> None:
            await asyncio.to_thread(_write_page, dest_dir, page)

        return await self._build(write)

    async def compile_stream(self) -> AsyncIterator[RenderedPage]:
        """Compile the site and yield rendered pages as they are emitted."""
        queue: asyncio.Queue[RenderedPage | None] = asyncio.Queue()

        async def produce() -> BuildResult:
            try:
                return await self._build(queue.put)
            finally:
                await queue.put(None)

        task = asyncio.create_task(produce())
        try:
            while True:
                item = await queue.get()
                if item is None:
                    break
                yield item
            await task
        finally:
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task


def _write_page(dest: Path, page: RenderedPage) -> None:
    """Write a rendered page under the destination folder.

    Args:
        dest: Base output directory.
        page: Rendered page.

    Raises:
        QuireError: If the page path points outside the destination folder.
    """
    target = (dest / page.path).resolve()
    if not target.is_relative_to(dest.resolve()):
        raise QuireError(f"Refusing to write outside the output folder: {page.path}")
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as f:
        f.write(page.contents)
