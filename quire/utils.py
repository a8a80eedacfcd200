"""Utility functions for Quire.

This module contains small helpers used throughout the Quire codebase:
path arithmetic for pages, structured data file parsing, and the two merge
primitives used when assembling page data.

Key functions:
    deep_merge: Recursive structural merge (used for front matter only).
    shallow_override: Flat top-level override (used for everything else).
    path_prefix: Relative prefix from a page back to the pages root.
    page_name: Basename of a page without its last extension.
    output_path: Output path of a page relative to the destination folder.
    load_data_file: Parse a JSON or YAML file.
"""

from __future__ import annotations

import asyncio
import copy
import json
from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

DATA_EXTENSIONS = (".json", ".yaml", ".yml")
HTML_SUFFIXES = (".html", ".htm")


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings into a new dictionary.

    Nested mappings are combined key by key. Lists are concatenated, base
    first. Any other value from ``override`` replaces the one in ``base``.
    Neither input is mutated.

    Args:
        base: Lower-priority mapping.
        override: Higher-priority mapping.

    Returns:
        A new merged dictionary.

    Examples:
        >>> deep_merge({"site": {"title": "X"}}, {"site": {"author": "Y"}})
        {'site': {'title': 'X', 'author': 'Y'}}
    """
    merged = {key: copy.deepcopy(value) for key, value in base.items()}
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + copy.deepcopy(value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def shallow_override(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Combine mappings left to right; later top-level keys win.

    Args:
        *layers: Mappings in increasing priority. None entries are skipped.

    Returns:
        A new dictionary.
    """
    result: dict[str, Any] = {}
    for layer in layers:
        if layer:
            result.update(layer)
    return result


def page_name(path: Path) -> str:
    """Return the basename of a page without its last extension.

    Examples:
        >>> page_name(Path("pages/release-1.0.html"))
        'release-1.0'
    """
    return path.stem


def path_prefix(path: Path, root: Path) -> str:
    """Return the relative prefix from a page back to the pages root.

    Args:
        path: Path of the page.
        root: Pages root directory.

    Returns:
        "" for top-level pages, "../" repeated once per nesting level otherwise.

    Examples:
        >>> path_prefix(Path("pages/blog/2024/post.md"), Path("pages"))
        '../../'
    """
    depth = len(path.relative_to(root).parts) - 1
    return "../" * depth


def output_path(rel: Path) -> str:
    """Return the output path of a page with its template suffix replaced by .html.

    Only the last suffix is replaced. A name that already ends in .html or
    .htm under the template suffix keeps it ("about.html.jinja" gives
    "about.html").

    Args:
        rel: Page path relative to the pages root.

    Returns:
        POSIX path string such as "blog/post.html".
    """
    posix = PurePosixPath(rel.as_posix())
    stem = posix.stem
    if PurePosixPath(stem).suffix.lower() not in HTML_SUFFIXES:
        stem = f"{stem}.html"
    return str(posix.with_name(stem))


def is_data_file(path: Path) -> bool:
    """Check if a path is a structured data file Quire can parse.

    Args:
        path: Path to check.

    Returns:
        True if the file has a .json, .yaml or .yml extension (case-insensitive).
    """
    return path.suffix.lower() in DATA_EXTENSIONS


def load_data_file(path: Path) -> Any:
    """Parse a JSON or YAML file.

    Args:
        path: Path to a data file.

    Returns:
        The parsed content; empty YAML documents become an empty dict.

    Raises:
        ValueError: If the file content is not valid JSON.
        yaml.YAMLError: If the file content is not valid YAML.
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    loaded = yaml.safe_load(text)
    return {} if loaded is None else loaded


async def read_text(path: Path) -> str:
    """Read a UTF-8 text file without blocking the event loop."""
    return await asyncio.to_thread(path.read_text, encoding="utf-8")


def lookup(mapping: Mapping[str, Any], key: str) -> Any:
    """Look up a dotted key in nested mappings.

    Args:
        mapping: Mapping to search.
        key: Key such as "nav.home"; a literal key containing dots wins.

    Returns:
        The value found.

    Raises:
        KeyError: If the key cannot be resolved.
    """
    if key in mapping:
        return mapping[key]
    current: Any = mapping
    for part in key.split("."):
        if not isinstance(current, Mapping) or part not in current:
            raise KeyError(key)
        current = current[part]
    return current
