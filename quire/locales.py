"""Locale strings for translated pages.

Each immediate child of the locales folder is one locale:
- a data file (``en.yaml``, ``de.json``) whose stem names the locale, or
- a folder (``en/``) whose data files become nested mappings keyed by stem.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from .errors import SetupError
from .utils import is_data_file, load_data_file, lookup


@dataclass(frozen=True)
class LocaleTable:
    """Mapping of locale name to translated strings.

    Attributes:
        strings: Locale name to (possibly nested) key/string mapping.
    """

    strings: Mapping[str, Mapping[str, Any]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def locales(self) -> list[str]:
        return list(self.strings)

    def __bool__(self) -> bool:
        return bool(self.strings)

    def __contains__(self, locale: object) -> bool:
        return locale in self.strings

    def translate(self, locale: str | None, key: str) -> str:
        return translate(self, locale, key)


def translate(table: LocaleTable, locale: str | None, key: str) -> str:
    """Return the string for ``key`` in ``locale``, or ``key`` itself.

    Dotted keys walk nested mappings. Missing locales, missing keys and
    non-scalar values all fall back to the key, so this never raises.

    Args:
        table: Loaded locale table.
        locale: Locale name.
        key: String key, e.g. "nav.home".

    Returns:
        The translated string or the key unchanged.
    """
    strings = table.strings.get(locale) if locale is not None else None
    if not strings:
        return key
    try:
        value = lookup(strings, key)
    except KeyError:
        return key
    if value is None or isinstance(value, (Mapping, list)):
        return key
    return str(value)


async def load_locales(folder: Path) -> LocaleTable:
    """Load every locale under ``folder``.

    Args:
        folder: The locales folder; it may be missing.

    Returns:
        A LocaleTable; empty when the folder does not exist.

    Raises:
        SetupError: If a locale file cannot be parsed.
    """
    if not folder.is_dir():
        return LocaleTable()
    children = [
        child
        for child in sorted(folder.iterdir())
        if not child.name.startswith(".") and (child.is_dir() or is_data_file(child))
    ]
    loaded = await asyncio.gather(*(asyncio.to_thread(_load_child, c) for c in children))
    strings = {_child_name(child): content for child, content in zip(children, loaded)}
    return LocaleTable(MappingProxyType(strings))


def _child_name(path: Path) -> str:
    return path.name if path.is_dir() else path.stem


def _load_child(path: Path) -> dict[str, Any]:
    if path.is_dir():
        return {
            _child_name(child): _load_child(child)
            for child in sorted(path.iterdir())
            if not child.name.startswith(".") and (child.is_dir() or is_data_file(child))
        }
    try:
        content = load_data_file(path)
    except Exception as exc:
        raise SetupError(f"Invalid locale file: {exc}", path, exc) from exc
    if not isinstance(content, dict):
        raise SetupError("Locale file must contain a mapping", path)
    return content
