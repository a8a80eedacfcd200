"""Template helpers and the helper provisioner.

The helper set a page receives depends on the engine's declared
capabilities:
- Engines with a native helper library (Jinja filters and tests) only get
  the ``repeat`` loop helper; their filters are registered on the engine.
- All other engines get the generic helper library defined here.
- Every engine gets ``current_page``, and ``translate`` when the page has a
  locale and the engine supports i18n.
"""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import mistune
from markupsafe import Markup, escape

from .locales import LocaleTable, translate
from .protocols import I18N, NATIVE_HELPERS, TemplateEngine

if TYPE_CHECKING:
    from .content import Page

HANGUL_COMPAT_RE = re.compile(
    "[\u1100-\u11ff\u3130-\u318f\u3200-\u321e\u3260-\u327f\uffa0-\uffdc\uffe6]+"
)

_markdown = mistune.create_markdown(
    escape=False, plugins=["strikethrough", "footnotes", "table", "url"]
)


def markdown(text: str) -> Markup:
    """Convert Markdown to HTML."""
    return Markup(_markdown(str(text)))


def code(text: str, language: str | None = None) -> Markup:
    """Render a code block with Pygments syntax highlighting.

    Args:
        text: The code content.
        language: Language identifier (e.g., 'python', 'javascript').

    Returns:
        HTML string with highlighted code.
    """
    if language:
        try:
            from pygments import highlight
            from pygments.formatters import HtmlFormatter
            from pygments.lexers import get_lexer_by_name

            lexer = get_lexer_by_name(language, stripall=True)
            formatter = HtmlFormatter(nowrap=False, cssclass="highlight")
            return Markup(highlight(str(text), lexer, formatter))
        except Exception:
            pass
    lang_class = f' class="language-{escape(language)}"' if language else ""
    return Markup(f"<pre><code{lang_class}>{escape(str(text))}</code></pre>\n")


def slug(text: Any) -> str:
    """Convert text to a URL slug.

    Hangul compatibility characters are normalised and kept.

    Examples:
        >>> slug("Hello  World!")
        'hello-world'
    """
    value = HANGUL_COMPAT_RE.sub(
        lambda m: unicodedata.normalize("NFKC", m.group(0)), str(text)
    )
    value = value.lower().strip()
    value = re.sub(r"\s+", "-", value)
    value = re.sub(r"[^\w\-가-힣]+", "", value)
    return re.sub(r"--+", "-", value)


def lower(text: Any) -> str:
    return str(text).lower()


def upper(text: Any) -> str:
    return str(text).upper()


def equal(left: Any, right: Any) -> bool:
    return left == right


def repeat(count: int) -> range:
    """Return a range for looping ``count`` times in a template."""
    return range(max(int(count), 0))


def make_current_page(name: str) -> Callable[..., bool]:
    """Return a helper telling whether any given name is the current page.

    Example:
        ``{% if current_page("index", "home") %}class="active"{% endif %}``
    """

    def current_page(*names: str) -> bool:
        return name in names

    return current_page


def make_translate(table: LocaleTable, locale: str) -> Callable[[str], str]:
    """Return a ``translate(key)`` helper bound to one locale."""

    def translate_helper(key: str) -> str:
        return translate(table, locale, key)

    return translate_helper


def generic_helpers() -> dict[str, Callable[..., Any]]:
    """Helper library for engines without a native one."""
    return {
        "markdown": markdown,
        "code": code,
        "slug": slug,
        "lower": lower,
        "upper": upper,
        "equal": equal,
    }


class HelperProvisioner:
    """Produces the helper functions visible to a page's template.

    Attributes:
        engine: Active templating engine.
        locales: Locale table of the current snapshot.
        builtins: Whether builtin helpers are enabled.
    """

    def __init__(self, engine: TemplateEngine, locales: LocaleTable, builtins: bool = True):
        self.engine = engine
        self.locales = locales
        self.builtins = builtins

    def get_helpers(self, page: Page) -> dict[str, Callable[..., Any]]:
        """Return the helpers for one page.

        Args:
            page: Page about to be rendered.

        Returns:
            Mapping of helper name to function; empty if builtins are disabled.
        """
        if not self.builtins:
            return {}

        helpers: dict[str, Callable[..., Any]] = {
            "current_page": make_current_page(page.name),
        }
        if self.engine.supports(I18N) and self.locales and page.locale:
            helpers["translate"] = make_translate(self.locales, page.locale)

        if self.engine.supports(NATIVE_HELPERS):
            return {"repeat": repeat, **helpers}
        return {**helpers, **generic_helpers()}
