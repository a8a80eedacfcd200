"""Templating engine registry.

Engines are imported lazily so that a project only needs the library of the
engine it actually uses.
"""

from __future__ import annotations

import importlib
import importlib.util
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ..errors import ConfigurationError
from ..protocols import TemplateEngine


@dataclass(frozen=True)
class EngineSpec:
    """Where to find an engine and which library it needs.

    Attributes:
        module: Dotted module path of the engine implementation.
        class_name: Engine class inside the module.
        requires: Import name of the third-party library the engine needs.
    """

    module: str
    class_name: str
    requires: str


ENGINES: dict[str, EngineSpec] = {
    "jinja": EngineSpec("quire.engines.jinja", "JinjaEngine", "jinja2"),
    "markdown": EngineSpec("quire.engines.markdown", "MarkdownEngine", "mistune"),
}


def load_engine(name: str) -> type[TemplateEngine]:
    """Return the engine class registered under ``name``.

    Raises:
        ConfigurationError: If no engine has that name, or its library is
            not installed.
    """
    spec = ENGINES.get(name)
    if spec is None:
        choices = ", ".join(f'"{n}"' for n in sorted(ENGINES))
        raise ConfigurationError(
            f'There\'s no engine named "{name}". Use one of {choices} instead.'
        )
    if importlib.util.find_spec(spec.requires) is None:
        raise ConfigurationError(
            f'You need to install the "{spec.requires}" package to continue.'
        )
    module = importlib.import_module(spec.module)
    return getattr(module, spec.class_name)


def create_engine(options: Mapping[str, Any]) -> TemplateEngine:
    """Instantiate the engine named by the ``engine`` option."""
    engine_cls = load_engine(str(options.get("engine") or "jinja"))
    return engine_cls(options)
