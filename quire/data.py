"""Global data and collection loading for Quire.

Every ``setup()`` produces a new SiteSnapshot. Snapshots are never mutated;
the next setup replaces the whole snapshot.

Key functions:
- load_global_data: Parse every data file under the data folder.
- load_collections: Load collection configurations and templates.
- build_snapshot: Run all loads concurrently and freeze the results.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .config import folder_path
from .errors import SetupError
from .locales import LocaleTable, load_locales
from .protocols import TemplateEngine
from .utils import is_data_file, load_data_file, read_text

COLLECTION_CONFIG_NAMES = ("config.yaml", "config.yml", "config.json")
COLLECTION_TEMPLATE_GLOB = "template.*"


@dataclass
class Collection:
    """A named group of entries rendered through one template.

    Attributes:
        name: Collection name (its folder name).
        entries: Structured entries, one output page each.
        template: Template source shared by every entry.
        template_path: Path of the template file.
        metadata: Remaining configuration keys (slug key, output folder, layout...).
    """

    name: str
    entries: list[dict[str, Any]]
    template: str
    template_path: Path
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def slug_key(self) -> str:
        return str(self.metadata.get("slug", "slug"))

    @property
    def output(self) -> str:
        return str(self.metadata.get("output", self.name)).strip("/")


@dataclass(frozen=True)
class SiteSnapshot:
    """Read-only state produced by one setup pass.

    Attributes:
        version: Setup generation that produced this snapshot.
        data: Global data keyed by data-file stem.
        locales: Loaded locale table.
        collections: Collections keyed by name.
    """

    version: int
    data: Mapping[str, Any]
    locales: LocaleTable
    collections: Mapping[str, Collection]


async def load_global_data(folder: Path) -> dict[str, Any]:
    """Load every structured data file under ``folder``.

    Files are discovered recursively and sorted by path. They are parsed
    concurrently, then combined in sorted order, so a later path wins when
    two files share a stem.

    Args:
        folder: The data folder; it may be missing.

    Returns:
        Dictionary mapping file stem to parsed content.

    Raises:
        SetupError: If any data file cannot be parsed.
    """
    if not folder.is_dir():
        return {}
    paths = sorted(p for p in folder.rglob("*") if p.is_file() and is_data_file(p))
    contents = await asyncio.gather(*(_load_data(p) for p in paths))
    data: dict[str, Any] = {}
    for path, content in zip(paths, contents):
        data[path.stem] = content
    return data


async def _load_data(path: Path) -> Any:
    try:
        return await asyncio.to_thread(load_data_file, path)
    except Exception as exc:
        raise SetupError(f"Invalid data file: {exc}", path, exc) from exc


async def load_collections(
    folder: Path, data: Mapping[str, Any] | None = None
) -> dict[str, Collection]:
    """Load every collection under ``folder``.

    Each immediate child folder is one collection. Folders whose
    configuration is missing, unparseable or not a mapping are skipped.

    Args:
        folder: The collections folder; it may be missing.
        data: Global data, used when a collection names its entries by data key.

    Returns:
        Dictionary mapping collection name to Collection, in folder name order.

    Raises:
        SetupError: If a configured collection has no template file.
    """
    if not folder.is_dir():
        return {}
    children = sorted(
        p for p in folder.iterdir() if p.is_dir() and not p.name.startswith(".")
    )
    loaded = await asyncio.gather(*(_load_collection(c, data or {}) for c in children))
    return {c.name: c for c in loaded if c is not None}


async def _load_collection(
    folder: Path, data: Mapping[str, Any]
) -> Collection | None:
    config = await asyncio.to_thread(_load_collection_config, folder)
    if config is None:
        return None

    # Sorted so the first match is stable across platforms
    templates = sorted(p for p in folder.glob(COLLECTION_TEMPLATE_GLOB) if p.is_file())
    if not templates:
        raise SetupError(
            f"Collection {folder.name!r} has no {COLLECTION_TEMPLATE_GLOB} file", folder
        )
    template_path = templates[0]
    template = await read_text(template_path)

    metadata = dict(config)
    entries = metadata.pop("entries", None)
    data_key = metadata.get("data")
    if entries is None and data_key is not None:
        entries = data.get(data_key)
    if not isinstance(entries, list):
        entries = []
    return Collection(
        name=folder.name,
        entries=[e for e in entries if isinstance(e, dict)],
        template=template,
        template_path=template_path,
        metadata=metadata,
    )


def _load_collection_config(folder: Path) -> dict[str, Any] | None:
    """Return the collection configuration, or None if it is unusable."""
    for name in COLLECTION_CONFIG_NAMES:
        path = folder / name
        if not path.is_file():
            continue
        try:
            config = load_data_file(path)
        except Exception:
            return None
        return config if isinstance(config, dict) else None
    return None


async def build_snapshot(
    options: Mapping[str, Any], engine: TemplateEngine, version: int
) -> SiteSnapshot:
    """Load data, locales and collections concurrently into a new snapshot.

    The engine's own setup runs alongside the loads. Collections are handed
    to ``engine.build_collections`` once every collection has loaded.

    Args:
        options: Site options.
        engine: Active templating engine.
        version: Setup generation number.

    Returns:
        A frozen SiteSnapshot.

    Raises:
        SetupError: If any load fails.
    """

    async def collections_task() -> dict[str, Collection]:
        # Collections may name global data, so they read it after it loads
        data = await data_future
        collections = await load_collections(folder_path(options, "collections"), data)
        engine.build_collections(collections)
        return collections

    data_future = asyncio.ensure_future(load_global_data(folder_path(options, "data")))
    try:
        _, data, locales, collections = await asyncio.gather(
            engine.setup(),
            data_future,
            load_locales(folder_path(options, "locales")),
            collections_task(),
        )
    except SetupError:
        raise
    except Exception as exc:
        raise SetupError(f"Setup failed: {exc}", original_error=exc) from exc
    return SiteSnapshot(
        version=version,
        data=MappingProxyType(data),
        locales=locales,
        collections=MappingProxyType(collections),
    )
