"""Configuration loading for Quire.

Options come from three layers, lowest priority first:
- DEFAULT_CONFIG
- quire.yaml at the project root (optional)
- explicit overrides passed by the caller (CLI flags, Site options)

The "transform" option maps an output extension such as ".html" to a
callable (or list of callables) applied to rendered contents. Callables
cannot come from YAML, so it is only set through Site options.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILENAME = "quire.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "engine": "jinja",
    "builtins": True,
    "quiet": False,
    "default_locale": None,
    "default_layout": "default",
    "page_layouts": {},
    "output_dir": "dist",
    "transform": {},
}

# Input subfolders, relative to the project root
FOLDERS = {
    "pages": "pages",
    "layouts": "layouts",
    "partials": "partials",
    "data": "data",
    "locales": "locales",
    "collections": "collections",
}


def load_config(
    project_root: Path, overrides: Mapping[str, Any] | None = None
) -> dict[str, Any]:
    """Load site configuration for a project.

    Args:
        project_root: Root directory of the project.
        overrides: Explicit options; values of None are ignored.

    Returns:
        Dictionary containing configuration values, with defaults applied.
        The resolved project root is stored under "input".
    """
    config = DEFAULT_CONFIG.copy()
    config["page_layouts"] = {}
    config["transform"] = {}
    config_path = project_root / CONFIG_FILENAME
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(loaded)
    for key, value in (overrides or {}).items():
        if value is not None:
            config[key] = value
    config["input"] = project_root
    return config


def folder_path(options: Mapping[str, Any], key: str) -> Path:
    """Return the absolute path of one of the input subfolders.

    Args:
        options: Site options containing "input".
        key: One of the FOLDERS keys.
    """
    return Path(options["input"]) / FOLDERS[key]
